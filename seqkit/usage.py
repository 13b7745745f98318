"""
Help and usage rendering.

Every section of the usage block is a pure function of a command node and returns
either its text or "" when the section does not apply. render() stitches the
non-empty sections together, separated by a blank line:

    Usage:            use line and/or "<path> [command]", then the caller's suffix
    Aliases:          only when the command declares aliases
    Examples:         only when the command declares an example block
    <commands>        flat "Available Commands:" or one section per registered group,
                      then "Additional Commands:" for ungrouped children
    Flags:            local flags, wrapped table
    Global Flags:     persistent flags inherited from ancestors
    Additional help topics:
    Use "<path> [command] --help" for more information about a command.

Nothing here prints; the command layer decides where the text goes.
"""
import json

# Total width of the wrapped flags table.
FLAG_USAGE_WIDTH = 110

# Narrower description columns move to the next line at FALLBACK_INDENT.
MIN_WRAP_WIDTH = 24
FALLBACK_INDENT = 16

# A line may run this much past the wrap column when that finishes the text.
WRAP_SLOP = 5

HELP = "help"


def _rpad(text, padding):
    return f"{text:<{padding}}"


def use_line(command):
    """The full invocation line, e.g. "seqkit seq [flags]"."""
    line = command.use
    if command.parent:
        line = f"{command.parent.command_path} {line}"
    if any(not flag.hidden for flag in command.visible_flags.values()) and "[flags]" not in line:
        line += " [flags]"
    return line


def usage_section(command, suffix=""):
    text = "Usage:"
    if command.runnable:
        text += "\n  " + use_line(command)
    if command.has_available_subcommands:
        text += f"\n  {command.command_path} [command]"
    if suffix:
        text += " " + suffix
    return text


def aliases_section(command):
    if not command.aliases:
        return ""
    return "Aliases:\n  " + ", ".join((command.name, *command.aliases))


def examples_section(command):
    if not command.example:
        return ""
    return "Examples:\n" + command.example


def _listed(child):
    return child.available or child.name == HELP


def _listing(children):
    return "".join(
        f"\n  {_rpad(child.name, child.name_padding)} {child.descr}".rstrip() for child in children
    )


def commands_section(command):
    """
    List the subcommands, grouped when any registered group has a listed member.

    Grouped layout: one section per registered group, in registration order, then a
    trailing "Additional Commands:" section when some listed child has no group.
    """
    if not command.has_available_subcommands:
        return ""
    children = [child for child in command.commands if _listed(child)]
    groups = command.groups

    if not any(child.group is not None and child.group in groups for child in children):
        return "Available Commands:" + _listing(children)

    sections = []
    for group in groups:
        sections.append(group.title + _listing(child for child in children if child.group == group))
    if ungrouped := [child for child in children if child.group is None]:
        sections.append("Additional Commands:" + _listing(ungrouped))
    return "\n\n".join(sections)


def _default(flag):
    """The " (default ...)" suffix, omitted for zero values."""
    if flag.default == flag.type():
        return ""
    if flag.type is str:
        return f" (default {json.dumps(flag.default, ensure_ascii=False)})"
    if flag.type is bool:
        return " (default true)"
    return f" (default {flag.default})"


def _wrap_n(room, slop, text):
    """Split `text` at the last blank before `room`, unless it fits within room + slop."""
    if room + slop > len(text):
        return text, ""
    cut = max(text.rfind(blank, 0, room) for blank in " \t\n")
    if cut <= 0:
        return text, ""
    newline = text.rfind("\n", 0, room)
    if 0 < newline < cut:
        return text[:newline], text[newline + 1:]
    return text[:cut], text[cut + 1:]


def _wrap(indent, width, text):
    """
    Wrap `text` for a column starting at `indent` in a table `width` wide.

    Continuation lines are indented to the column. When fewer than MIN_WRAP_WIDTH
    characters remain, the text starts on the next line at FALLBACK_INDENT instead;
    if even that is too narrow it is not wrapped at all.
    """
    if width == 0:
        return text.replace("\n", "\n" + " " * indent)
    room = width - indent
    wrapped = ""
    if room < MIN_WRAP_WIDTH:
        indent = FALLBACK_INDENT
        room = width - indent
        wrapped = "\n" + " " * indent
    if room < MIN_WRAP_WIDTH:
        return text.replace("\n", wrapped)

    margin = "\n" + " " * indent
    room -= WRAP_SLOP
    line, text = _wrap_n(room, WRAP_SLOP, text)
    wrapped += line.replace("\n", margin)
    while text:
        line, text = _wrap_n(room, WRAP_SLOP, text)
        wrapped += margin + line.replace("\n", margin)
    return wrapped


def flag_usages(flags, width=FLAG_USAGE_WIDTH):
    """
    Render flags as an aligned two-column table.

    The description column starts three spaces after the longest flag spelling and
    is wrapped by _wrap(); only the trailing blanks of the whole table are trimmed.
    """
    rows = []
    for flag in sorted(flags, key=lambda x: x.name):
        if flag.hidden:
            continue
        if flag.shorthand:
            head = f"  -{flag.shorthand}, --{flag.name}"
        else:
            head = f"      --{flag.name}"
        if flag.varname:
            head += " " + flag.varname
        rows.append((head, flag.descr + _default(flag)))
    if not rows:
        return ""

    column = max(len(head) for head, _ in rows) + 3
    return "\n".join(_rpad(head, column) + _wrap(column, width, body) for head, body in rows).rstrip()


def local_flags_section(command):
    if not (table := flag_usages(command.local_flags.values())):
        return ""
    return "Flags:\n" + table


def inherited_flags_section(command):
    local = command.local_flags
    if not (table := flag_usages(flag for name, flag in command.inherited_flags.items() if name not in local)):
        return ""
    return "Global Flags:\n" + table


def help_topics_section(command):
    if not command.has_help_topics:
        return ""
    return "Additional help topics:" + "".join(
        f"\n  {_rpad(child.command_path, child.command_path_padding)} {child.descr}".rstrip()
        for child in command.commands if child.help_topic
    )


def hint_section(command):
    if not command.has_available_subcommands:
        return ""
    return f'Use "{command.command_path} [command] --help" for more information about a command.'


def render(command, suffix=""):
    """Render the usage block of `command`; `suffix` is appended verbatim to the usage line."""
    sections = (
        usage_section(command, suffix),
        aliases_section(command),
        examples_section(command),
        commands_section(command),
        local_flags_section(command),
        inherited_flags_section(command),
        help_topics_section(command),
        hint_section(command),
    )
    return "\n\n".join(section for section in sections if section) + "\n"


def render_help(command):
    """Render --help output: the long (or short) description followed by the usage block."""
    text = (command.long or command.descr).rstrip()
    if not (command.runnable or command.children):
        return text + "\n" if text else ""
    usage = render(command, command.suffix)
    return f"{text}\n\n{usage}" if text else usage


__all__ = (
    "FLAG_USAGE_WIDTH",
    "use_line",
    "usage_section",
    "aliases_section",
    "examples_section",
    "commands_section",
    "flag_usages",
    "local_flags_section",
    "inherited_flags_section",
    "help_topics_section",
    "hint_section",
    "render",
    "render_help",
)
