"""
Usage renderer tests (section functions and full help blocks).

Scope
- Validate each section function in isolation: usage line, aliases, examples,
  grouped and flat command listings, wrapped flag tables, help topics, hint line.
- Validate the stitched render() and render_help() output on a small tree.

Conventions
- Test method names follow CamelCase per project convention.
- Trees are built with the public API (Command, Group, Flag).
"""
import unittest
from unittest import TestCase

from seqkit import Command, Group, Flag
from seqkit.usage import *


def noop(values, args):
    pass


def build_tree():
    root = Command(
        name="tool",
        descr="a test tool",
        flags=(Flag("verbose", "v", bool, descr="be verbose", persistent=True),),
    )
    root.add_group(Group("basic", "Basic:"), Group("misc", "Misc:"))
    Command(noop, root, name="stats", descr="simple statistics", group="basic")
    Command(noop, root, name="seq", descr="transform sequences", group="basic", aliases=("sequence",))
    Command(noop, root, name="version", descr="print version", group="misc")
    Command(noop, root, name="sum", descr="checksum")
    return root


class SectionTest(TestCase):
    """Each section function on its own."""

    def setUp(self):
        self.root = build_tree()
        self.stats = self.root.lookup("stats")

    def testUsageSectionForContainer(self):
        self.assertEqual(usage_section(self.root), "Usage:\n  tool [command]")

    def testUsageSectionForRunnable(self):
        self.assertEqual(usage_section(self.stats), "Usage:\n  tool stats [flags]")

    def testUsageSectionSuffix(self):
        self.assertEqual(usage_section(self.stats, "FILE..."), "Usage:\n  tool stats [flags] FILE...")

    def testUseLineKeepsExplicitFlagsMarker(self):
        command = Command(noop, self.root, name="grep", use="grep [flags] PATTERN")
        self.assertEqual(use_line(command), "tool grep [flags] PATTERN")

    def testAliases(self):
        self.assertEqual(aliases_section(self.root.lookup("seq")), "Aliases:\n  seq, sequence")
        self.assertEqual(aliases_section(self.stats), "")

    def testExamples(self):
        command = Command(noop, self.root, name="head", example="tool head -n 1 a.fa")
        self.assertEqual(examples_section(command), "Examples:\ntool head -n 1 a.fa")
        self.assertEqual(examples_section(self.stats), "")

    def testGroupedCommands(self):
        self.assertEqual(
            commands_section(self.root),
            "Basic:\n"
            f"  {'seq':<11} transform sequences\n"
            f"  {'stats':<11} simple statistics\n"
            "\n"
            "Misc:\n"
            f"  {'version':<11} print version\n"
            "\n"
            "Additional Commands:\n"
            f"  {'sum':<11} checksum",
        )

    def testGroupOrderFollowsRegistration(self):
        root = Command(name="tool")
        root.add_group(Group("z", "Zeta:"), Group("a", "Alpha:"))
        Command(noop, root, name="first", group="a")
        Command(noop, root, name="last", group="z")
        section = commands_section(root)
        self.assertLess(section.index("Zeta:"), section.index("Alpha:"))
        self.assertLess(section.index("last"), section.index("Alpha:"))
        self.assertGreater(section.index("first"), section.index("Alpha:"))
        self.assertNotIn("Additional Commands:", section)

    def testFlatCommandsWithoutGroups(self):
        root = Command(name="tool")
        Command(noop, root, name="b", descr="second")
        Command(noop, root, name="a", descr="first")
        self.assertEqual(
            commands_section(root),
            f"Available Commands:\n  {'a':<11} first\n  {'b':<11} second",
        )

    def testHiddenCommandsAreNotListed(self):
        Command(noop, self.root, name="secret", descr="hidden", group="misc", hidden=True)
        self.assertNotIn("secret", commands_section(self.root))
        self.assertIsNotNone(self.root.lookup("secret"))

    def testNamePaddingGrowsWithLongNames(self):
        root = Command(name="tool")
        Command(noop, root, name="fq2fa", descr="convert")
        Command(noop, root, name="concatenate", descr="join")
        Command(noop, root, name="fish-for-sequences", descr="find")
        self.assertIn(f"  {'fq2fa':<18} convert", commands_section(root))

    def testNoCommandsSectionForLeaf(self):
        self.assertEqual(commands_section(self.stats), "")
        self.assertEqual(hint_section(self.stats), "")

    def testLocalAndInheritedFlags(self):
        self.assertEqual(
            local_flags_section(self.root),
            "Flags:\n"
            "  -h, --help      help for tool\n"
            "  -v, --verbose   be verbose",
        )
        self.assertEqual(inherited_flags_section(self.root), "")
        self.assertEqual(local_flags_section(self.stats), "Flags:\n  -h, --help   help for stats")
        self.assertEqual(inherited_flags_section(self.stats), "Global Flags:\n  -v, --verbose   be verbose")

    def testHelpTopics(self):
        Command(parent=self.root, name="formats", descr="supported formats")
        section = help_topics_section(self.root)
        self.assertTrue(section.startswith("Additional help topics:\n  tool formats"))
        self.assertTrue(section.endswith("supported formats"))
        self.assertNotIn("formats", commands_section(self.root))

    def testHint(self):
        self.assertEqual(
            hint_section(self.root),
            'Use "tool [command] --help" for more information about a command.',
        )


class FlagUsagesTest(TestCase):
    """The wrapped flag table."""

    def testDefaults(self):
        table = flag_usages((
            Flag("threads", "j", int, 4, "number of CPUs"),
            Flag("out-file", "o", str, "-", "out file"),
            Flag("line-width", "w", int, 0, "line width"),
            Flag("quiet", type=bool, descr="be quiet"),
        ))
        self.assertEqual(
            table,
            "  -w, --line-width int    line width\n"
            '  -o, --out-file string   out file (default "-")\n'
            "      --quiet             be quiet\n"
            "  -j, --threads int       number of CPUs (default 4)",
        )

    def testStringDefaultIsQuoted(self):
        table = flag_usages((Flag("id-regexp", default=r"^(\S+)\s?", descr="regular expression for parsing ID"),))
        self.assertEqual(table, r'      --id-regexp string   regular expression for parsing ID (default "^(\\S+)\\s?")')

    def testHiddenFlagsAreSkipped(self):
        self.assertEqual(flag_usages((Flag("debug", type=bool, hidden=True),)), "")

    def testWrapsLongDescriptions(self):
        table = flag_usages((Flag("long", descr="alpha beta gamma delta epsilon zeta"),), width=50)
        self.assertEqual(
            table,
            "      --long string   alpha beta gamma delta\n"
            "                      epsilon zeta",
        )

    def testNarrowColumnStartsOnNextLine(self):
        table = flag_usages((Flag("long", descr="alpha beta gamma delta epsilon zeta"),), width=40)
        self.assertEqual(
            table,
            "      --long string   \n"
            "                alpha beta gamma\n"
            "                delta epsilon zeta",
        )

    def testTooNarrowIsNotWrapped(self):
        table = flag_usages((Flag("long", descr="alpha beta gamma delta epsilon zeta"),), width=30)
        self.assertEqual(table, "      --long string   alpha beta gamma delta epsilon zeta")

    def testShortTailStaysOnLine(self):
        table = flag_usages((Flag("long", descr="alpha beta gamma delta epsi"),), width=50)
        self.assertEqual(table, "      --long string   alpha beta gamma delta epsi")


class RenderTest(TestCase):
    """The stitched usage block and the --help output."""

    def setUp(self):
        self.root = build_tree()

    def testRenderLeaf(self):
        self.assertEqual(
            render(self.root.lookup("stats")),
            "Usage:\n"
            "  tool stats [flags]\n"
            "\n"
            "Flags:\n"
            "  -h, --help   help for stats\n"
            "\n"
            "Global Flags:\n"
            "  -v, --verbose   be verbose\n",
        )

    def testRenderSectionOrder(self):
        text = render(self.root)
        order = [text.index(marker) for marker in ("Usage:", "Basic:", "Misc:", "Additional Commands:", "Flags:", "Use \"tool")]
        self.assertEqual(order, sorted(order))
        self.assertTrue(text.endswith("for more information about a command.\n"))

    def testRenderHelpPrependsDescription(self):
        text = render_help(self.root)
        self.assertTrue(text.startswith("a test tool\n\nUsage:\n"))

    def testRenderHelpPrefersLongDescription(self):
        command = Command(noop, name="solo", descr="short", long="the long story")
        self.assertTrue(render_help(command).startswith("the long story\n\nUsage:\n  solo [flags]"))

    def testRenderHelpForTopic(self):
        topic = Command(name="formats", descr="supported formats", long="FASTA and FASTQ")
        self.assertEqual(render_help(topic), "FASTA and FASTQ\n")

    def testRenderHelpUsesInheritedSuffix(self):
        root = Command(name="tool", suffix="FILE...")
        leaf = Command(noop, root, name="stats")
        self.assertIn("Usage:\n  tool stats [flags] FILE...", render_help(leaf))


if __name__ == "__main__":
    unittest.main()
