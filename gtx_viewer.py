import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from tkinter.scrolledtext import ScrolledText
import os
from PIL import Image, ImageTk
from WiiU.gtx_reader import (
    BLOCK_TYPE_IMAGE_DATA, BLOCK_TYPE_IMAGE_INFO, BLOCK_TYPE_NAMES, GTXError, read_blocks,
)
from WiiU.wiiu_texture_decoder import WiiUTextureDecoder

class GTXViewer:
    def __init__(self, root):
        self.root = root
        self.root.title("GTX Viewer")
        self.blocks = []
        self.current_file = None
        self.texture_image = None
        self.textures = {}
        self.texture_decoder = WiiUTextureDecoder()
        self.status_label = None
        self.create_widgets()
        self.setup_context_menu()

    def setup_context_menu(self):
        self.context_menu = tk.Menu(self.root, tearoff=0)
        self.context_menu.add_command(label="Export image", command=self.export_selected_texture)
        self.tree.bind("<Button-3>", self.show_context_menu)

    def show_context_menu(self, event):
        item = self.tree.identify_row(event.y)
        if item:
            self.tree.selection_set(item)
            self.context_menu.post(event.x_root, event.y_root)

    def texture_for_block(self, block_index):
        for tex_meta in self.textures.values():
            if block_index in (tex_meta['info_index'], tex_meta['data_index']):
                return tex_meta
        return None

    def export_selected_texture(self):
        selection = self.tree.selection()
        if not selection:
            return
        tex_meta = self.texture_for_block(int(selection[0]))
        if tex_meta is None or tex_meta['data'] is None:
            messagebox.showerror("Error", "The selected block has no associated texture.")
            return
        default_filename = os.path.splitext(os.path.basename(self.current_file))[0] + ".png"
        output_path = filedialog.asksaveasfilename(
            title="Export Texture",
            initialfile=default_filename,
            defaultextension=".png",
            filetypes=(("PNG files", "*.png"), ("BMP files", "*.bmp"), ("All files", "*.*"))
        )
        if not output_path:
            return
        try:
            self.texture_decoder.save_texture(
                tex_meta['data'], tex_meta['width'], tex_meta['height'], tex_meta['format'], output_path
            )
            messagebox.showinfo("Success", f"Texture successfully exported to:\n{output_path}")
        except Exception as e:
            messagebox.showerror("Error", f"Failed to export texture:\n{str(e)}")

    def create_widgets(self):
        toolbar = tk.Frame(self.root, relief=tk.RAISED, bd=1)
        toolbar.pack(side=tk.TOP, fill=tk.X)
        tk.Button(toolbar, text="Open GTX File", command=self.open_file).pack(side=tk.LEFT, padx=4, pady=3)
        tk.Button(toolbar, text="Export Image", command=self.export_selected_texture).pack(side=tk.LEFT, padx=4, pady=3)
        self.status_label = tk.Label(self.root, text="No file loaded", anchor="w", relief=tk.SUNKEN, padx=6)
        self.status_label.pack(side=tk.BOTTOM, fill=tk.X)

        main_panel = ttk.PanedWindow(self.root, orient=tk.HORIZONTAL)
        main_panel.pack(fill=tk.BOTH, expand=True)
        block_frame = ttk.LabelFrame(main_panel, text="BLK{ Sections")
        main_panel.add(block_frame, weight=1)
        self.tree = ttk.Treeview(block_frame, columns=("Index", "Type", "Size", "Details"), show="headings")
        for column, title, width in (("Index", "#", 40), ("Type", "Type", 60),
                                     ("Size", "Payload", 90), ("Details", "Contents", 260)):
            self.tree.heading(column, text=title)
            self.tree.column(column, width=width, stretch=(column == "Details"))
        self.tree.pack(fill=tk.BOTH, expand=True)

        right_panel = ttk.PanedWindow(main_panel, orient=tk.VERTICAL)
        main_panel.add(right_panel, weight=3)
        header_frame = ttk.LabelFrame(right_panel, text="Block Header")
        right_panel.add(header_frame, weight=1)
        self.details = ScrolledText(header_frame, height=10, font=("Courier", 10))
        self.details.pack(fill=tk.BOTH, expand=True)

        self.texture_frame = ttk.LabelFrame(right_panel, text="Untiled Surface")
        right_panel.add(self.texture_frame, weight=3)
        self.canvas = tk.Canvas(self.texture_frame, bg='grey80')
        self.scrollbar_y = ttk.Scrollbar(self.texture_frame, orient=tk.VERTICAL, command=self.canvas.yview)
        self.scrollbar_x = ttk.Scrollbar(self.texture_frame, orient=tk.HORIZONTAL, command=self.canvas.xview)
        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.scrollbar_y.grid(row=0, column=1, sticky="ns")
        self.scrollbar_x.grid(row=1, column=0, sticky="ew")
        self.texture_frame.rowconfigure(0, weight=1)
        self.texture_frame.columnconfigure(0, weight=1)
        self.canvas.configure(yscrollcommand=self.scrollbar_y.set, xscrollcommand=self.scrollbar_x.set)
        self.canvas.bind('<Configure>', lambda e: self.canvas.configure(scrollregion=self.canvas.bbox("all")))
        self.tree.bind("<<TreeviewSelect>>", self.show_details)

    def open_file(self):
        file_path = filedialog.askopenfilename(
            title="Open GTX File",
            filetypes=(("GTX files", "*.gtx"), ("All files", "*.*"))
        )
        if not file_path:
            return
        self.current_file = file_path
        self.root.title(f"GTX Viewer - {os.path.basename(file_path)}")
        try:
            with open(file_path, 'rb') as f:
                parsed_blocks = read_blocks(f.read())
            self.populate_tree(parsed_blocks)
            self.status_label.config(text=f"Blocks: {len(parsed_blocks)} | Textures: {len(self.textures)}")
        except (GTXError, OSError) as e:
            self.status_label.config(text="Error")
            messagebox.showerror("Error", f"Failed to read or parse GTX file:\n{str(e)}")

    def show_texture(self, tex_meta):
        self.canvas.delete("all")
        width, height, texture_format = tex_meta['width'], tex_meta['height'], tex_meta['format']
        if width == 0 or height == 0:
            self.canvas.create_text(50, 50, text="Invalid texture dimensions (0x0).", fill="orange")
            return False
        format_name = self.texture_decoder.format_name(texture_format)
        if not self.texture_decoder.supports(texture_format):
            self.canvas.create_text(10, 10, text=f"Format {format_name} cannot be previewed.", anchor=tk.NW, fill="orange")
            return False
        try:
            img = self.texture_decoder.decode_texture(tex_meta['data'], width, height, texture_format)
            img = img.crop((0, 0, width, height))
            canvas_width = self.texture_frame.winfo_width() - 20
            canvas_height = self.texture_frame.winfo_height() - 20
            if img.width > canvas_width or img.height > canvas_height:
                ratio = min(canvas_width / img.width, canvas_height / img.height)
                if ratio > 0:
                    img_display_width = int(img.width * ratio)
                    img_display_height = int(img.height * ratio)
                    if img_display_width > 0 and img_display_height > 0:
                        img = img.resize((img_display_width, img_display_height), Image.Resampling.LANCZOS)
            self.texture_image = ImageTk.PhotoImage(img)
            self.canvas.create_image(0, 0, anchor=tk.NW, image=self.texture_image)
            self.canvas.config(scrollregion=self.canvas.bbox("all"))
            return True
        except Exception as e:
            error_message = f"Failed to display texture ({width}x{height}, {format_name}):\n{str(e)}"
            self.canvas.create_text(10, 10, text=error_message, fill="red", anchor=tk.NW, width=self.canvas.winfo_width() - 20)
            return False

    def populate_tree(self, parsed_blocks):
        self.tree.delete(*self.tree.get_children())
        self.blocks = parsed_blocks
        self.canvas.delete("all")
        self.details.delete(1.0, tk.END)
        self.textures.clear()
        current_texture_id_awaiting_data = None

        for i, block in enumerate(self.blocks):
            details_summary = BLOCK_TYPE_NAMES.get(block.block_type, f"Unknown (0x{block.block_type:02X})")
            if block.block_type == BLOCK_TYPE_IMAGE_INFO:
                width, height, texture_format = self.texture_decoder.parse_texture_header(block.data)
                details_summary = f"Image Info: {width}x{height} ({self.texture_decoder.format_name(texture_format)})"
                current_texture_id_awaiting_data = f"texture_{len(self.textures)}"
                self.textures[current_texture_id_awaiting_data] = {
                    'width': width,
                    'height': height,
                    'format': texture_format,
                    'info_index': i,
                    'data': None,
                    'data_index': None
                }
            elif block.block_type == BLOCK_TYPE_IMAGE_DATA:
                details_summary = "Image Data"
                if current_texture_id_awaiting_data:
                    tex_info = self.textures[current_texture_id_awaiting_data]
                    tex_info['data'] = block.data
                    tex_info['data_index'] = i
                    details_summary += f" ({tex_info['width']}x{tex_info['height']} {self.texture_decoder.format_name(tex_info['format'])})"
                    current_texture_id_awaiting_data = None
                else:
                    details_summary += " (Orphaned? No preceding image info)"
            self.tree.insert(
                "", "end", iid=str(i),
                values=(i, f"0x{block.block_type:02X}", f"{block.data_size} bytes", details_summary),
                tags=(f"offset_{block.offset}", f"type_{block.block_type}")
            )

    def show_details(self, event):
        selection = self.tree.selection()
        if not selection:
            return
        block_index = int(selection[0])
        block = self.blocks[block_index]
        header = block.header
        self.details.delete(1.0, tk.END)
        self.details.insert(tk.END, f"Block Type: 0x{block.block_type:02X}\n")
        self.details.insert(tk.END, f"Data Size: {block.data_size} bytes\n")
        self.details.insert(tk.END, f"Data Offset: 0x{block.offset:X}\n")
        self.details.insert(tk.END, f"Version: {header.major}.{header.minor} - Id: {header.block_id} - Index: {header.index}\n")
        tex_meta = self.texture_for_block(block_index)
        if tex_meta is not None:
            self.details.insert(tk.END, f"Texture Dimensions: {tex_meta['width']}x{tex_meta['height']}\n")
            self.details.insert(tk.END, f"Format: {self.texture_decoder.format_name(tex_meta['format'])}\n")
            if tex_meta['data'] is not None:
                self.show_texture(tex_meta)
            else:
                self.canvas.delete("all")
                self.canvas.create_text(50, 50, text="Image info found, but no image data block follows it.", fill="orange")
        self.details.insert(tk.END, "\nHex Data (first 64 bytes or less):\n")
        max_hex_bytes = min(len(block.data), 64)
        hex_lines = []
        for i in range(0, max_hex_bytes, 16):
            chunk = block.data[i:i+16]
            hex_str = ' '.join(f"{b:02X}" for b in chunk)
            ascii_str = ''.join(chr(b) if 32 <= b <= 126 else '.' for b in chunk)
            hex_lines.append(f"{i:04X}: {hex_str:<48} {ascii_str}")
        self.details.insert(tk.END, "\n".join(hex_lines))
        if len(block.data) > max_hex_bytes:
            self.details.insert(tk.END, "\n...")

if __name__ == "__main__":
    root = tk.Tk()
    app = GTXViewer(root)
    root.geometry("1200x800")
    root.mainloop()
