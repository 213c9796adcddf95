"""
Image preview component showing the selected image scaled to the panel width.
"""

import logging
from typing import Any, Dict, Optional

import customtkinter as ctk
from PIL import Image

from core.image_handler import ImageHandler


class ImagePreview(ctk.CTkFrame):
    """Shows the selected path, basic image info and a width-fitted preview."""

    def __init__(self, parent, image_handler: ImageHandler,
                 max_height: Optional[int] = None):
        super().__init__(parent)

        self.image_handler = image_handler
        self.max_height = max_height
        self.logger = logging.getLogger(__name__)

        self._source_image: Optional[Image.Image] = None
        self._ctk_image: Optional[ctk.CTkImage] = None
        self._last_width = 0
        self._resize_after_id = None

        self._setup_ui()

    def _setup_ui(self):
        """Setup the user interface."""
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self.path_label = ctk.CTkLabel(self, text="", anchor="w", justify="left")
        self.path_label.grid(row=0, column=0, sticky="ew", padx=10, pady=(8, 0))

        self.info_label = ctk.CTkLabel(self, text="", anchor="w",
                                       font=ctk.CTkFont(size=11), text_color="gray")
        self.info_label.grid(row=1, column=0, sticky="ew", padx=10)

        self.image_label = ctk.CTkLabel(self, text="No image selected", text_color="gray")
        self.image_label.grid(row=2, column=0, sticky="nsew", padx=10, pady=10)

        self.bind("<Configure>", self._on_configure)

    def show_image(self, image: Image.Image, file_path: str,
                   info: Optional[Dict[str, Any]] = None):
        """Display a newly selected image."""
        self._source_image = image
        self.path_label.configure(text=f"Selected: {file_path}")
        self.info_label.configure(text=self._format_info(info))
        self._last_width = 0
        self._render()

    @staticmethod
    def _format_info(info: Optional[Dict[str, Any]]) -> str:
        if not info:
            return ""
        size_kb = info.get('file_size', 0) / 1024
        return (f"{info.get('width')} × {info.get('height')} px  |  "
                f"{info.get('format')}  |  {size_kb:.1f} KB")

    def _available_width(self) -> int:
        width = self.winfo_width() - 20
        return width if width > 1 else 600

    def _render(self):
        """Scale the current image to the available width."""
        if self._source_image is None:
            return

        width = self._available_width()
        if width == self._last_width:
            return
        self._last_width = width

        try:
            preview = self.image_handler.create_preview(
                self._source_image, width, self.max_height)
            self._ctk_image = ctk.CTkImage(
                light_image=preview, dark_image=preview, size=preview.size)
            self.image_label.configure(image=self._ctk_image, text="")
        except Exception as e:
            self.logger.error(f"Error updating preview: {e}")
            self.image_label.configure(text="Preview error")

    def _on_configure(self, event):
        """Re-scale the preview after the window settles."""
        if self._resize_after_id is not None:
            self.after_cancel(self._resize_after_id)
        self._resize_after_id = self.after(100, self._on_resize_idle)

    def _on_resize_idle(self):
        self._resize_after_id = None
        self._render()
