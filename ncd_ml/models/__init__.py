from .compressors import Algorithm, CompressionLevel, make_compressor
from .matrix import SymmetricMatrix
from .ncd import NCDEngine
from .wavefront import wavefront_partition

__all__ = ["Algorithm", "CompressionLevel", "make_compressor",
           "NCDEngine", "SymmetricMatrix", "wavefront_partition"]
