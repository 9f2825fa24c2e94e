"""sglang-edge - provision an Ubuntu/CUDA host to serve SGLang"""

__version__ = "0.1.0"
