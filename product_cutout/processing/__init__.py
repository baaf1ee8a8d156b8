"""Local background-removal pipeline components."""

from .color import ForegroundClassifier, HeuristicColorClassifier, color_mask, warm_product_predicate
from .compositor import apply_alpha
from .edges import LAPLACIAN_KERNEL, edge_mask
from .fusion import binarize, dilate, fuse, smooth, union
from .optimizer import OptimizedImage, fit_inside, optimize
from .pipeline import LocalPipeline, process
from .raster import ConvolutionKernel, ImageBuffer, Mask, PixelCoordinate, decode, encode

__all__ = [
    "ForegroundClassifier",
    "HeuristicColorClassifier",
    "color_mask",
    "warm_product_predicate",
    "apply_alpha",
    "LAPLACIAN_KERNEL",
    "edge_mask",
    "binarize",
    "dilate",
    "fuse",
    "smooth",
    "union",
    "OptimizedImage",
    "fit_inside",
    "optimize",
    "LocalPipeline",
    "process",
    "ConvolutionKernel",
    "ImageBuffer",
    "Mask",
    "PixelCoordinate",
    "decode",
    "encode",
]
