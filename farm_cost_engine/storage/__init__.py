"""
Dataset loading for the CLI.

Reads exported farm data into engine models.
"""

from .dataset import CycleWindow, Dataset, load_dataset

__all__ = ["CycleWindow", "Dataset", "load_dataset"]
