"""
Composition of the seqkit command tree.

build_root_command() is called exactly once by the entry point. It creates the root
command, registers the help groups in display order, declares the persistent flags
every subcommand inherits, attaches the subcommands supplied by the caller and seals
the tree.
"""
import logging

from .commands import Command, Group
from .config import SEQ_TYPES, compression_table, resolved
from .flags import Flag

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Display order of the grouped help sections.
GROUPS = (
    Group("basic", "Commands for Basic Operation:"),
    Group("format", "Commands for Format Conversion:"),
    Group("search", "Commands for Searching:"),
    Group("set", "Commands for Set Operation:"),
    Group("edit", "Commands for Edit:"),
    Group("order", "Commands for Ordering:"),
    Group("bam", "Commands for BAM Processing:"),
    Group("misc", "Commands for Miscellaneous:"),
)

DESCR = "a cross-platform and ultrafast toolkit for FASTA/Q file manipulation"

LONG = f"""SeqKit -- {DESCR}

Version: {VERSION}

Author: Wei Shen <shenwei356@gmail.com>

Documents  : http://bioinf.shenwei.me/seqkit
Source code: https://github.com/shenwei356/seqkit
Please cite: https://doi.org/10.1371/journal.pone.0163962


Seqkit utlizies the pgzip (https://github.com/klauspost/pgzip) package to
read and write gzip file, and the outputted gzip file would be slighty
larger than files generated by GNU gzip.

Seqkit writes gzip files very fast, much faster than the multi-threaded pigz,
therefore there's no need to pipe the result to gzip/pigz.

Seqkit also supports reading and writing xz (.xz) and zstd (.zst) formats since v2.2.0.
Bzip2 format is supported since v2.4.0.

Compression level:
{compression_table()}
"""


def persistent_flags(config):
    """The process-wide flags declared on the root, with defaults taken from `config`."""
    return (
        Flag(
            "seq-type", "t", str, config.seq_type,
            "sequence type (%s) (for auto, it automatically detect by the first sequence)" % "|".join(SEQ_TYPES),
            choices=SEQ_TYPES, persistent=True,
        ),
        Flag(
            "threads", "j", int, config.threads,
            "number of CPUs. can also set with environment variable SEQKIT_THREADS)",
            persistent=True,
        ),
        Flag(
            "line-width", "w", int, config.line_width,
            "line width when outputting FASTA format (0 for no wrap)",
            persistent=True,
        ),
        Flag(
            "id-regexp", type=str, default=config.id_regexp,
            descr="regular expression for parsing ID",
            persistent=True,
        ),
        Flag(
            "id-ncbi", type=bool, default=config.id_ncbi,
            descr="FASTA head is NCBI-style, e.g. >gi|110645304|ref|NC_002516.2| Pseud...",
            persistent=True,
        ),
        Flag(
            "out-file", "o", str, config.out_file,
            'out file ("-" for stdout, suffix .gz for gzipped out)',
            persistent=True,
        ),
        Flag(
            "quiet", type=bool, default=config.quiet,
            descr="be quiet and do not show extra information",
            persistent=True,
        ),
        Flag(
            "alphabet-guess-seq-length", type=int, default=config.alphabet_guess_seq_length,
            descr="length of sequence prefix of the first FASTA record based on which seqkit guesses the "
                  "sequence type (0 for whole seq)",
            persistent=True,
        ),
        Flag(
            "infile-list", "X", str, config.infile_list,
            "file of input files list (one file per line), if given, they are appended to files from cli arguments",
            persistent=True,
        ),
        Flag(
            "compress-level", type=int, default=config.compress_level,
            descr='compression level for gzip, zstd, xz and bzip2. type "seqkit -h" for the range and default '
                  "value for each format",
            persistent=True,
        ),
    )


def build_root_command(*children, config=None):
    """
    Build and seal the seqkit command tree.

    Parameters
    - children: subcommands to attach under the root; their groups must be among GROUPS.
    - config: ResolvedConfig supplying the flag defaults (defaults to resolved()).

    Raises the construction errors of the command layer (duplicate names, unknown
    groups, clashing flags) before anything is dispatched.
    """
    config = resolved() if config is None else config
    root = Command(
        name="seqkit",
        descr=DESCR,
        long=LONG,
        flags=persistent_flags(config),
    )
    root.add_group(*GROUPS)
    root.add(*children)
    logger.debug("built command tree with %d subcommands", len(children))
    return root.seal()


__all__ = (
    "VERSION",
    "GROUPS",
    "persistent_flags",
    "build_root_command",
)
