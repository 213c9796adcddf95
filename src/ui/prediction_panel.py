"""
Prediction panel showing the arg-max label and the top-k scores.
"""

import logging
from typing import List

import customtkinter as ctk

from core.classifier import Prediction


class PredictionPanel(ctk.CTkFrame):
    """Panel for the classification result of the selected image."""

    def __init__(self, parent, top_k: int = 5, probabilities: bool = True):
        super().__init__(parent)

        self.top_k = top_k
        self.probabilities = probabilities
        self.logger = logging.getLogger(__name__)
        self.score_rows: List[tuple] = []

        self._setup_ui()

    def _setup_ui(self):
        """Setup the user interface."""
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(self, text="Prediction", font=ctk.CTkFont(size=13, weight="bold")).grid(
            row=0, column=0, columnspan=3, sticky="w", padx=10, pady=(8, 2))

        self.label_var = ctk.StringVar(value="-")
        ctk.CTkLabel(self, textvariable=self.label_var,
                     font=ctk.CTkFont(size=22, weight="bold")).grid(
            row=1, column=0, columnspan=3, sticky="w", padx=10, pady=(0, 6))

        for i in range(self.top_k):
            name = ctk.CTkLabel(self, text="", anchor="w", width=160)
            bar = ctk.CTkProgressBar(self)
            bar.set(0)
            value = ctk.CTkLabel(self, text="", anchor="e", width=60)

            row = i + 2
            name.grid(row=row, column=0, sticky="w", padx=(10, 5), pady=1)
            bar.grid(row=row, column=1, sticky="ew", padx=5, pady=1)
            value.grid(row=row, column=2, sticky="e", padx=(5, 10), pady=1)
            self.score_rows.append((name, bar, value))

        self.detail_label = ctk.CTkLabel(self, text="", anchor="w",
                                         font=ctk.CTkFont(size=11), text_color="gray")
        self.detail_label.grid(row=self.top_k + 2, column=0, columnspan=3,
                               sticky="ew", padx=10, pady=(4, 8))

    def show_prediction(self, prediction: Prediction):
        """Display a finished prediction."""
        self.label_var.set(prediction.label)

        for i, (name, bar, value) in enumerate(self.score_rows):
            if i < len(prediction.top_k):
                label, score = prediction.top_k[i]
                name.configure(text=label)
                bar.set(min(max(score, 0.0), 1.0))
                value.configure(text=f"{score:.1%}" if self.probabilities else f"{score:.3f}")
            else:
                name.configure(text="")
                bar.set(0)
                value.configure(text="")

        self.detail_label.configure(
            text=f"Class index {prediction.index}  |  {prediction.elapsed_ms:.1f} ms")

    def show_pending(self, text: str = "Classifying..."):
        self.clear()
        self.label_var.set(text)

    def clear(self, text: str = "-"):
        """Reset the panel."""
        self.label_var.set(text)
        for name, bar, value in self.score_rows:
            name.configure(text="")
            bar.set(0)
            value.configure(text="")
        self.detail_label.configure(text="")
