"""Network, layers, costs and the training pipeline."""

from .costs import cross_entropy_cost, mean_square_error
from .layer import Layer
from .network import Network

__all__ = ["Layer", "Network", "cross_entropy_cost", "mean_square_error"]
