"""
Process-wide defaults shared by every subcommand.

What this module provides
- resolve_threads(cpus, env): the default worker count for the `threads` flag.
- ResolvedConfig / resolve() / resolved(): every materialized default, computed once.
- Codec / codec_for() / resolve_compress_level(): how the `out-file` suffix selects an
  output codec and which `compress-level` values that codec accepts.

Nothing here reads or writes sequence data; subcommands consume these values read-only.
"""
import functools
import logging
import os
import re
from types import MappingProxyType
from typing import NamedTuple

from .faults import FaultCode, InvalidCompressLevelError
from .flags import INT64

logger = logging.getLogger(__name__)

THREADS_ENV = "SEQKIT_THREADS"

# Upper bound applied to the host CPU count when no override is given.
THREADS_CAP = 4

DEFAULT_ID_REGEXP = r"^(\S+)\s?"

SEQ_TYPES = ("dna", "rna", "protein", "unlimit", "auto")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def resolve_threads(cpus: int, env: str) -> int:
    """
    Compute the default thread count from the host CPU count and an override.

    - the host count is capped at 4;
    - a non-empty `env` that is a base-10 64-bit integer replaces it, anything else
      is ignored;
    - a result below 1 falls back to the host count, uncapped.
    """
    threads = min(cpus, THREADS_CAP)
    if env:
        try:
            override = int(env) if _INTEGER.fullmatch(env) else None
        except ValueError:
            override = None
        if override is not None and override in INT64:
            threads = override
        else:
            logger.debug("ignoring malformed %s=%r", THREADS_ENV, env)
    if threads < 1:
        threads = cpus
    return threads


class ResolvedConfig(NamedTuple):
    """Defaults bound to the persistent flags of the root command."""
    threads: int
    seq_type: str = "auto"
    line_width: int = 60
    id_regexp: str = DEFAULT_ID_REGEXP
    id_ncbi: bool = False
    out_file: str = "-"
    quiet: bool = False
    alphabet_guess_seq_length: int = 10000
    infile_list: str = ""
    compress_level: int = -1


def resolve(environ=None, cpus=None) -> ResolvedConfig:
    """
    Materialize the defaults from the environment and the host.

    Parameters
    - environ: mapping to read SEQKIT_THREADS from (defaults to os.environ).
    - cpus: host CPU count (defaults to os.cpu_count(), 1 when it is unknown).
    """
    environ = os.environ if environ is None else environ
    cpus = (os.cpu_count() or 1) if cpus is None else cpus
    config = ResolvedConfig(threads=resolve_threads(cpus, environ.get(THREADS_ENV, "")))
    logger.debug("default threads resolved to %d (cpus=%d)", config.threads, cpus)
    return config


@functools.cache
def resolved() -> ResolvedConfig:
    """Return the process-wide configuration, resolving it on first use."""
    return resolve()


class Codec(NamedTuple):
    name: str
    suffix: str
    levels: range | None
    default: int | None
    comment: str = ""
    # shown in the compression table when it differs from name
    label: str = ""


CODECS = MappingProxyType({
    codec.suffix: codec for codec in (
        Codec("gzip", ".gz", range(1, 10), 5, "https://github.com/klauspost/pgzip sets 5 as the default value."),
        Codec("xz", ".xz", None, None, "https://github.com/ulikunitz/xz does not support."),
        Codec("zstd", ".zst", range(1, 5), 2, "roughly equals to zstd 1, 3, 7, 11, respectively."),
        Codec("bzip2", ".bz2", range(1, 10), 6, "https://github.com/dsnet/compress", "bzip"),
    )
})


def codec_for(path):
    """Return the Codec selected by the suffix of `path`, or None for plain output."""
    if path == "-":
        return None
    for suffix, codec in CODECS.items():
        if path.endswith(suffix):
            return codec
    return None


def resolve_compress_level(path, level=-1):
    """
    Return the effective compression level for writing to `path`.

    -1 selects the codec default. Plain output and codecs without adjustable levels
    yield None. Levels outside the codec range raise InvalidCompressLevelError.
    """
    codec = codec_for(path)
    if codec is None or codec.levels is None:
        return None
    if level == -1:
        return codec.default
    if level not in codec.levels:
        raise InvalidCompressLevelError(
            "invalid compression level for %s: %d, valid range: %d-%d"
            % (codec.name, level, codec.levels.start, codec.levels.stop - 1),
            code=FaultCode.INVALID_COMPRESS_LEVEL,
            hint="choose a level in range or use -1 for the %s default (%d)" % (codec.name, codec.default),
        )
    return level


def compression_table():
    """Render the codec table shown in the root command's long help."""
    lines = ["  format   range   default  comment"]
    for codec in CODECS.values():
        levels = "%d-%d" % (codec.levels.start, codec.levels.stop - 1) if codec.levels else "NA"
        default = str(codec.default) if codec.default is not None else "NA"
        lines.append(f"  {codec.label or codec.name:<8} {levels:<7} {default:<8} {codec.comment}".rstrip())
    return "\n".join(lines)


__all__ = (
    "THREADS_ENV",
    "THREADS_CAP",
    "DEFAULT_ID_REGEXP",
    "SEQ_TYPES",
    "resolve_threads",
    "ResolvedConfig",
    "resolve",
    "resolved",
    "Codec",
    "CODECS",
    "codec_for",
    "resolve_compress_level",
    "compression_table",
)
