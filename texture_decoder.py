# texture_decoder.py
from abc import ABC, abstractmethod

class TextureDecoder(ABC):
    @abstractmethod
    def decode_texture(self, texture_data, width, height, texture_format):
        """Decode texture data and return a PIL Image."""
        pass

    @abstractmethod
    def parse_texture_header(self, data):
        """Parse texture header and return (width, height, texture_format)."""
        pass

    @abstractmethod
    def supports(self, texture_format):
        """Return True if decode_texture can handle texture_format."""
        pass

    def save_texture(self, texture_data, width, height, texture_format, output_path):
        img = self.decode_texture(texture_data, width, height, texture_format)
        img.save(output_path)
        return img
