from __future__ import annotations

import bz2
import gzip
from pathlib import Path

import pytest

from ncd_ml.errors import InvalidInputError, SourceIOError
from ncd_ml.models.compressors import (Algorithm, Bzip2Compressor, CompressionLevel, Compressor,
                                       GzipCompressor, make_compressor)

TEXT = b"the quick brown fox jumps over the lazy dog. " * 40


def test_gzip_count_matches_gzip_module() -> None:
    comp = make_compressor("gzip")
    assert comp.compressed_size(TEXT) == len(gzip.compress(TEXT, compresslevel=6, mtime=0))


def test_bzip2_count_matches_bz2_module() -> None:
    comp = make_compressor("bzip2", "best_compression")
    assert comp.compressed_size(TEXT) == len(bz2.compress(TEXT, 9))


def test_level_tables() -> None:
    assert GzipCompressor("best_speed").numeric_level == 1
    assert GzipCompressor("best_compression").numeric_level == 9
    assert GzipCompressor().numeric_level == -1
    assert [Bzip2Compressor(lv).numeric_level for lv in CompressionLevel] == [6, 1, 9]


def test_factory_picks_algorithm() -> None:
    comp = make_compressor(Algorithm.BZIP2, CompressionLevel.BEST_SPEED)
    assert isinstance(comp, Bzip2Compressor)
    assert comp.algorithm is Algorithm.BZIP2
    assert comp.level is CompressionLevel.BEST_SPEED


def test_unknown_names_are_invalid_input() -> None:
    with pytest.raises(InvalidInputError):
        make_compressor("lz4")
    with pytest.raises(InvalidInputError):
        make_compressor("gzip", "ultra")


def test_counts_are_deterministic() -> None:
    for algo in Algorithm:
        comp = make_compressor(algo)
        assert comp.compressed_size(TEXT) == comp.compressed_size(TEXT) > 0


def test_str_is_utf8_encoded() -> None:
    comp = make_compressor("gzip")
    assert comp.compressed_size("naïve café") == comp.compressed_size("naïve café".encode("utf-8"))


def test_pair_is_one_stream() -> None:
    comp = make_compressor("gzip")
    assert comp.compressed_size(b"abc" * 50, b"xyz" * 50) == comp.compressed_size(b"abc" * 50 + b"xyz" * 50)


@pytest.mark.parametrize("algo", ["gzip", "bzip2"])
def test_files_stream_in_chunks(tmp_path: Path, algo: str) -> None:
    a, b = tmp_path / "a.bin", tmp_path / "b.bin"
    a.write_bytes(TEXT)
    b.write_bytes(TEXT[::-1])
    comp = make_compressor(algo, chunk_size=7)
    assert comp.compressed_size(a, b, is_file=True) == comp.compressed_size(TEXT + TEXT[::-1])
    assert comp.compressed_size(str(a), is_file=True) == comp.compressed_size(TEXT)


def test_empty_input_is_invalid(tmp_path: Path) -> None:
    comp = make_compressor("gzip")
    with pytest.raises(InvalidInputError):
        comp.compressed_size(b"")
    with pytest.raises(InvalidInputError):
        comp.compressed_size("", "")
    empty = tmp_path / "empty.txt"
    empty.write_bytes(b"")
    with pytest.raises(InvalidInputError):
        comp.compressed_size(empty, is_file=True)
    with pytest.raises(InvalidInputError):
        comp.compressed_size("", is_file=True)


def test_missing_file_is_io_error(tmp_path: Path) -> None:
    comp = make_compressor("bzip2")
    missing = tmp_path / "nope.txt"
    with pytest.raises(SourceIOError) as info:
        comp.compressed_size(missing, is_file=True)
    assert isinstance(info.value, OSError)
    assert info.value.path == str(missing)


def test_second_missing_file_is_io_error(tmp_path: Path) -> None:
    present = tmp_path / "a.txt"
    present.write_bytes(TEXT)
    with pytest.raises(SourceIOError):
        make_compressor("gzip").compressed_size(present, tmp_path / "b.txt", is_file=True)


def test_literal_mode_rejects_paths(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError):
        make_compressor("gzip").compressed_size(tmp_path)


def test_base_class_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        Compressor()
    assert isinstance(GzipCompressor(), Compressor)
