"""Weight Lifting Exercises toolbox: cleaning, random-forest training and held-out evaluation."""

__version__ = "0.1.0"
