"""
Main application entry point for the ONNX Image Classifier Desktop App.
"""

import argparse
import logging
import sys
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox
from typing import Any, Dict, List, Optional

import customtkinter as ctk

from core.classifier import Prediction, build_engine
from core.errors import ClassifierError, ConfigurationError
from core.image_handler import ImageHandler
from core.session import ClassifierSession
from core.settings import build_image_handler, load_settings
from ui.image_view import ImagePreview
from ui.prediction_panel import PredictionPanel


def setup_logging(config: Dict[str, Any], stream=None):
    """Setup logging configuration."""
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if config.get('log_file'):
        handlers.insert(0, logging.FileHandler(config['log_file']))

    logging.basicConfig(
        level=getattr(logging, str(config.get('log_level', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


class ImageClassifierApp:
    """Main application class."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or load_settings()
        setup_logging(self.config)
        self.logger = logging.getLogger(__name__)

        settings_error = None
        try:
            self.image_handler = build_image_handler(self.config)
        except ConfigurationError as e:
            self.logger.error(f"{e}; using default preprocessing")
            settings_error = str(e)
            self.image_handler = ImageHandler()
        self.session = ClassifierSession(self.image_handler)

        self._setup_ui()

        if settings_error:
            self.root.after(50, lambda: messagebox.showerror(
                "Settings Error", f"{settings_error}\n\nDefault preprocessing is used instead."))

        # Load after the window exists so errors can be shown in a dialog
        self.root.after(100, self._load_model)

        self.logger.info("Application initialized successfully")

    def _setup_ui(self):
        """Initialize the user interface."""
        ctk.set_appearance_mode(self.config.get('ui_theme', 'dark'))
        ctk.set_default_color_theme("blue")

        self.root = ctk.CTk()
        self.root.title(self.config.get('app_title', 'Cat vs Dog Classifier'))
        self.root.geometry(self.config.get('window_size', '900x760'))
        self.root.minsize(480, 420)
        self.root.protocol("WM_DELETE_WINDOW", self._on_closing)

        self.root.grid_columnconfigure(0, weight=1)
        self.root.grid_rowconfigure(2, weight=1)

        self._create_menu()
        self._create_main_layout()

    def _create_menu(self):
        """Create the application menu."""
        menubar = tk.Menu(self.root)
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Open Image", command=self._select_image)
        file_menu.add_command(label="Reload Model", command=self._load_model)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self._on_closing)

        help_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Help", menu=help_menu)
        help_menu.add_command(label="About", command=self._show_about)

    def _create_main_layout(self):
        """Create the main application layout."""
        ctk.CTkLabel(
            self.root,
            text=self.config.get('app_title', 'Cat vs Dog Classifier'),
            font=ctk.CTkFont(size=20, weight="bold"),
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        toolbar = ctk.CTkFrame(self.root, fg_color="transparent")
        toolbar.grid(row=1, column=0, sticky="ew", padx=8)

        self.select_btn = ctk.CTkButton(toolbar, text="Select Image", command=self._select_image)
        self.select_btn.pack(side=tk.LEFT, padx=4, pady=4)

        self.classify_btn = ctk.CTkButton(toolbar, text="Classify",
                                          command=self._classify_current, state="disabled")
        self.classify_btn.pack(side=tk.LEFT, padx=4, pady=4)

        self.image_preview = ImagePreview(
            self.root, self.image_handler,
            max_height=self.config.get('preview_max_height'))
        self.image_preview.grid(row=2, column=0, sticky="nsew", padx=8, pady=4)

        self.prediction_panel = PredictionPanel(
            self.root,
            top_k=self.config.get('top_k', 5),
            probabilities=self.config.get('apply_softmax', True))
        self.prediction_panel.grid(row=3, column=0, sticky="ew", padx=8, pady=4)

        self.status_label = ctk.CTkLabel(self.root, text="Loading model...", anchor="w")
        self.status_label.grid(row=4, column=0, sticky="ew", padx=12, pady=(0, 6))

    def _set_status(self, text: str):
        self.status_label.configure(text=text)

    def _update_buttons(self):
        ready = self.session.has_selection and self.session.model_ready
        self.classify_btn.configure(state="normal" if ready else "disabled")

    def _load_model(self):
        """Load (or reload) the ONNX model and its labels."""
        try:
            engine = build_engine(self.config, self.image_handler)
        except ClassifierError as e:
            self.logger.error(f"Model not loaded: {e}")
            self.session.clear_engine()
            self._set_status(f"Model not loaded: {e}")
            self._update_buttons()
            messagebox.showerror("Model Error", str(e))
            return

        self.session.set_engine(engine)
        self.prediction_panel.clear()
        self._set_status(
            f"Model loaded: {engine.model_path.name} ({len(engine.labels)} labels)")
        self._update_buttons()

        if self.session.has_selection and self.config.get('auto_classify', True):
            self._classify_current()

    def _select_image(self):
        """Pick an image file and show it."""
        path = filedialog.askopenfilename(
            title="Select Image",
            filetypes=self.image_handler.dialog_filetypes()
        )
        if not path:
            return

        if not self.session.select_image(path):
            self._set_status(f"Could not open {Path(path).name}")
            return

        self.image_preview.show_image(
            self.session.image, path, self.session.image_info)
        self.prediction_panel.clear()
        self._update_buttons()

        if not self.session.model_ready:
            self._set_status("Image loaded; no model available for classification")
        elif self.config.get('auto_classify', True):
            self._classify_current()
        else:
            self._set_status("Image loaded")

    def _classify_current(self):
        """Classify the selected image on a worker thread."""
        if not self.session.has_selection:
            messagebox.showwarning("No Image", "No image selected for classification.")
            return
        if not self.session.model_ready:
            messagebox.showerror("Classification Error", "No model is loaded.")
            return

        image_path = self.session.selected_path
        image = self.session.image
        engine = self.session.engine
        generation = self.session.generation

        self.prediction_panel.show_pending()
        self._set_status("Classifying image...")

        threading.Thread(
            target=self._classify_async,
            args=(engine, image, image_path, generation),
            daemon=True,
        ).start()

    def _classify_async(self, engine, image, image_path: str, generation: int):
        """Runs inference off the UI thread and schedules UI updates."""
        try:
            prediction = engine.classify_image(image, image_path=image_path)
        except Exception as e:
            self.logger.error(f"Error classifying image {image_path}: {e}")
            message = str(e)
            self.root.after(
                0, lambda: self._on_classification_failed(image_path, message, generation))
            return
        self.root.after(
            0, lambda: self._on_classification_complete(image_path, prediction, generation))

    def _on_classification_complete(self, image_path: str, prediction: Prediction,
                                    generation: int):
        """Show the prediction if neither the image nor the model changed meanwhile."""
        if not self.session.apply_prediction(image_path, prediction, generation):
            return
        self.prediction_panel.show_prediction(prediction)
        self._set_status(f"Classification complete: {prediction.summary()}")

    def _on_classification_failed(self, image_path: str, message: str, generation: int):
        if not self.session.is_current(image_path, generation):
            return
        self.prediction_panel.clear("Classification failed")
        self._set_status(message)
        messagebox.showerror("Classification Error", message)

    def _show_about(self):
        """Show about dialog."""
        about_text = """ONNX Image Classifier

Pick an image and see the label predicted by a pre-trained
convolutional network loaded from an ONNX file.

Images are resized to the model input size, scaled to [0, 1]
and fed to onnxruntime; the highest-scoring output is mapped
through the label file.

Developed with Python, CustomTkinter, Pillow and onnxruntime."""
        messagebox.showinfo("About", about_text)

    def _on_closing(self):
        """Handle application closing."""
        self.logger.info("Application closing...")
        self.root.destroy()

    def run(self):
        """Start the application."""
        try:
            self.logger.info("Starting Image Classifier Application")
            self.root.mainloop()
        except Exception as e:
            self.logger.error(f"Fatal error in main loop: {e}")
            raise


def classify_headless(config: Dict[str, Any], image_path: str,
                      show_scores: bool = False) -> int:
    """Classify one image without a window and print the label."""
    logger = logging.getLogger(__name__)
    try:
        engine = build_engine(config, build_image_handler(config))
        prediction = engine.classify_file(image_path)
    except ClassifierError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(prediction.label)
    if show_scores:
        for label, score in prediction.top_k:
            print(f"{score:.4f}\t{label}")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="image-classifier",
        description="Classify images with a pre-trained ONNX network.")
    parser.add_argument('--config', help="path to settings.json")
    parser.add_argument('--model', help="ONNX model file (overrides settings)")
    parser.add_argument('--labels', help="JSON label file (overrides settings)")
    parser.add_argument('--image', help="classify this image and exit without a window")
    parser.add_argument('--top-k', type=int, dest='top_k',
                        help="number of scores to keep; with --image, print them")
    return parser.parse_args(argv)


def _absolute(path: Optional[str]) -> Optional[str]:
    return str(Path(path).resolve()) if path else None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = load_settings(
        args.config,
        overrides={
            'model_path': _absolute(args.model),
            'labels_path': _absolute(args.labels),
            'top_k': args.top_k,
        },
    )

    if args.image:
        setup_logging(config, stream=sys.stderr)
        return classify_headless(config, args.image, show_scores=args.top_k is not None)

    try:
        app = ImageClassifierApp(config)
        app.run()
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")
    except Exception as e:
        print(f"Fatal error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
