"""
seqkit command layer: build, compose, and run the command tree.

What this module provides
- Group: a help-text category (id + title) registered on a parent command.
- Command: one node of the tree with:
  • a name (unique among siblings, aliases included), short and long descriptions,
    an optional group, an example block and a usage suffix;
  • declared flags, split into local flags and persistent flags inherited by descendants;
  • an optional callback, invoked as callback(values, args) once parsing succeeded.
- command(...): create a Command directly or as a decorator.

Construction rules (checked while the tree is assembled, never at dispatch time)
- Sibling names and aliases are unique (DuplicateCommandError).
- A child's group must be registered on its parent (UnknownGroupError).
- Flag names and shorthands are unique across a command's local flags and every
  persistent flag inherited from its ancestors (DuplicateFlagError).
- seal() freezes a finished tree (SealedCommandError on later changes).

Dispatch
- Routing strips flags first and descends through children by the leading
  non-flag tokens; the routed command then parses every flag it can see.
- Every command has a local -h/--help flag; the root also answers `help [command]`,
  a built-in that is routable but never listed.
- Parsing faults print "Error: <message>" and the routed command's usage (or a
  pointer to --help for an unknown command) to stderr and propagate; callback
  failures propagate as CommandException (foreign exceptions are wrapped).
"""
import difflib
import functools
import inspect
import logging
import operator
import re
from collections import deque

from rich.console import Console

from .faults import *
from .flags import Flag, Values
from .usage import HELP, render, render_help
from .utils import *

logger = logging.getLogger(__name__)

# Rendered text goes to the consoles' streams unchanged.
console = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)
errors = Console(stderr=True, markup=False, highlight=False, emoji=False, soft_wrap=True)

# Minimum width of the name column in command listings.
MIN_NAME_PADDING = 11


class CommandType(type):
    """
    Metaclass that gives commands and groups read-only, introspectable fields.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name listed in __introspectable__ is exposed via mirror().
    - __displayable__ (if set) narrows which fields __repr__/__rich_repr__ show, so a
      node never prints its whole subtree.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Group(metaclass=CommandType):
    """
    Help-text category for subcommands, e.g. Group("basic", "Commands for Basic Operation:").

    Groups organize presentation only; they never affect routing.
    """
    __introspectable__ = ("id", "title")

    def __init__(self, id, title, /):
        for name, value in (("id", id), ("title", title)):
            if not isinstance(value, str):
                raise TypeError(f"{type(self).__typename__} {name!r} must be a string")
            elif not value.strip():
                raise ValueError(f"{type(self).__typename__} {name!r} cannot be empty")
        self._id = id.strip()
        self._title = title.strip()

    def __eq__(self, other):
        if not isinstance(other, Group):
            return NotImplemented
        return (self._id, self._title) == (other._id, other._title)

    def __hash__(self):
        return hash((self._id, self._title))


def _process_strings(cls, metadata):
    """
    Normalize scalar string metadata in place.

    - name: required, a single shell word.
    - descr, long, example, suffix, use: optional, trimmed, non-empty when provided.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\s-][^\s]*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word, got {name!r}")
    metadata["name"] = name

    for key in ("descr", "long", "example", "suffix", "use"):
        if not isinstance(object := metadata[key], str | Unset):
            raise TypeError(f"{cls.__typename__} {key!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
        metadata[key] = object

    if metadata["use"] and metadata["use"].split()[0] != name:
        raise ValueError(f"{cls.__typename__} 'use' must start with the command name {name!r}")
    metadata["use"] = coalesce(metadata["use"], name)
    metadata["descr"] = coalesce(metadata["descr"], "")
    metadata["long"] = coalesce(metadata["long"], "")
    metadata["example"] = coalesce(metadata["example"], "")


def _process_aliases(cls, metadata):
    """Validate aliases: single words, distinct from the name and from each other."""
    if isinstance(metadata["aliases"], str):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        elif not re.fullmatch(r"[^\s-][^\s]*", alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} alias {alias!r} must be a single word")
        elif alias == metadata["name"] or alias in aliases:
            raise DuplicateCommandError(f"{cls.__typename__} alias {alias!r} is repeated")
        aliases.append(alias)
    metadata["aliases"] = tuple(aliases)


def _process_group(cls, metadata):
    """A group is referenced by Group or by its id; it is resolved against the parent later."""
    if not isinstance(group := metadata["group"], Group | str | Unset):
        raise TypeError(f"{cls.__typename__} 'group' must be a group or a group id")
    elif isinstance(group, str) and not (group := group.strip()):
        raise ValueError(f"{cls.__typename__} 'group' cannot be empty")
    metadata["group"] = coalesce(group)


def _process_flags(cls, metadata):
    """
    Register declared flags plus the implicit -h/--help flag.

    Names and shorthands must be unique within the command itself; clashes with
    inherited flags are checked when the command is attached.
    """
    flags = {}
    shorthands = set()
    declared = list(metadata["flags"])
    if all(getattr(flag, "name", None) != HELP for flag in declared):
        declared.append(Flag(HELP, "h", bool, descr=f"help for {metadata['name']}"))

    for flag in declared:
        if not isinstance(flag, Flag):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags")
        if flag.name in flags:
            raise DuplicateFlagError(f"{cls.__typename__} {metadata['name']!r} flag name {flag.name!r} is already in use")
        if flag.shorthand and flag.shorthand in shorthands:
            raise DuplicateFlagError(f"{cls.__typename__} {metadata['name']!r} flag shorthand {flag.shorthand!r} is already in use")
        flags[flag.name] = flag
        if flag.shorthand:
            shorthands.add(flag.shorthand)
    metadata["flags"] = flags


def _check_flags(command, inherited):
    """
    Ensure no flag of `command` (or of any descendant) shadows an inherited persistent flag.

    inherited: mapping of name -> Flag visible from the ancestors.
    """
    shorthands = {flag.shorthand: flag for flag in inherited.values() if flag.shorthand}
    for flag in command._flags.values():
        if flag.name in inherited:
            raise DuplicateFlagError(
                f"{type(command).__typename__} {command.name!r} flag name {flag.name!r} is already in use by an ancestor"
            )
        if flag.shorthand and flag.shorthand in shorthands:
            raise DuplicateFlagError(
                f"{type(command).__typename__} {command.name!r} flag shorthand {flag.shorthand!r} "
                f"is already in use by {shorthands[flag.shorthand].name!r}"
            )
    inherited = inherited | {name: flag for name, flag in command._flags.items() if flag.persistent}
    for child in command._children.values():
        _check_flags(child, inherited)


def _resolve_group(parent, child):
    """Bind the child's group reference to the Group registered on the parent."""
    if child._group is None:
        return
    ident = child._group.id if isinstance(child._group, Group) else child._group
    for group in parent._groups:
        if group.id == ident:
            if isinstance(child._group, Group) and child._group != group:
                raise UnknownGroupError(
                    f"{type(child).__typename__} {child.name!r} group {child._group!r} does not match {group!r}"
                )
            child._group = group
            return
    raise UnknownGroupError(
        f"{type(child).__typename__} {child.name!r} group id {ident!r} is not registered on {parent.name!r}"
    )


class Command(metaclass=CommandType):
    """
    One node of the command tree.

    Lifecycle
    - Built once during startup, attached under a parent with add() (or parent=...),
      sealed with seal(), then only read.

    Introspection
    - Metadata is exposed through read-only properties; containers are copies.
    """
    __introspectable__ = (
        "name",
        "descr",
        "long",
        "use",
        "example",
        "aliases",
        "group",
        "groups",
        "flags",
        "parent",
        "children",
        "hidden",
    )

    __displayable__ = (
        "name",
        "descr",
        "group",
        "hidden",
    )

    def __init__(
            self,
            callback=Unset,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            long=Unset,
            use=Unset,
            group=Unset,
            aliases=(),
            example=Unset,
            flags=(),
            suffix=Unset,
            *,
            hidden=False,
    ):
        """
        Parameters
        - callback: Callable[[Values, tuple[str, ...]], None] | Unset
          Invoked with the parsed flag values and positional arguments. Commands
          without a callback are containers and print their help when invoked.
        - parent: Command | Unset
          Attach under this command right away.
        - name: defaults to the callback's __name__ (underscores become dashes).
        - descr: short description; defaults to the first line of the callback docstring.
        - long: long description shown by --help.
        - use: the use line, starting with the name (e.g. "seq [flags] FILE...").
        - group: Group or group id registered on the parent.
        - aliases: alternative names that route to this command.
        - example: example block shown under "Examples:".
        - flags: Flag declarations (persistent ones are inherited by descendants).
        - suffix: free text appended to the usage line; inherited when Unset.
        - hidden: routable but never listed.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")

        if name is Unset and callback is not Unset:
            name = getattr(callback, "__name__", Unset)
            name = name.replace("_", "-").strip("-") if isinstance(name, str) else name
        if descr is Unset and callback is not Unset:
            descr = next(iter((inspect.getdoc(callback) or "").splitlines()), "") or Unset

        metadata = {
            "name": name,
            "descr": descr,
            "long": long,
            "use": use,
            "group": group,
            "aliases": aliases,
            "example": example,
            "flags": flags,
            "suffix": suffix,
        }
        _process_strings(type(self), metadata)
        _process_aliases(type(self), metadata)
        _process_group(type(self), metadata)
        _process_flags(type(self), metadata)

        self._callback = callback
        self._groups = []
        self._parent = None
        self._children = {}
        self._hidden = bool(hidden)
        self._sealed = False
        for key, value in metadata.items():
            setattr(self, "_" + key, value)

        if parent:
            parent.add(self)

    # ── tree navigation ─────────────────────────────────────────────────────

    @property
    def root(self):
        """Return the topmost command of the hierarchy."""
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """Return the ancestry from the root to this command as a tuple."""
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def command_path(self):
        """Space-separated route from the root, e.g. "seqkit seq"."""
        return " ".join(command.name for command in self.path)

    @property
    def runnable(self):
        return self._callback is not Unset

    @property
    def sealed(self):
        return self._sealed

    @property
    def suffix(self):
        """Usage-line suffix, inherited from the nearest ancestor that sets one."""
        for command in reversed(self.path):
            if command._suffix is not Unset:
                return command._suffix
        return ""

    @property
    def commands(self):
        """Children sorted by name."""
        return sorted(self._children.values(), key=lambda x: x.name)

    def lookup(self, name, /):
        """Return the child routed by `name` (name or alias), or None."""
        try:
            return self._children[name]
        except KeyError:
            pass
        for child in self._children.values():
            if name in child._aliases:
                return child
        return None

    # ── availability (what the help renderer lists) ─────────────────────────

    @property
    def available(self):
        """Listed in help: not hidden, and either runnable or hosting listed subcommands."""
        if self._hidden:
            return False
        return self.runnable or self.has_available_subcommands

    @property
    def has_available_subcommands(self):
        return any(child.available for child in self._children.values())

    @property
    def help_topic(self):
        """Pure documentation entry: not runnable, not hidden, only topic children."""
        if self.runnable or self._hidden:
            return False
        return all(child.help_topic for child in self._children.values())

    @property
    def has_help_topics(self):
        return any(child.help_topic for child in self._children.values())

    @property
    def name_padding(self):
        """Width of the name column used by the parent's listing."""
        if not self._parent:
            return MIN_NAME_PADDING
        return max(MIN_NAME_PADDING, *(len(child.name) for child in self._parent._children.values()))

    @property
    def command_path_padding(self):
        """Width of the command-path column used by the parent's help-topic listing."""
        if not self._parent:
            return MIN_NAME_PADDING
        return max(MIN_NAME_PADDING, *(len(child.command_path) for child in self._parent._children.values()))

    # ── flags ───────────────────────────────────────────────────────────────

    @property
    def local_flags(self):
        """Flags declared on this command (persistent ones included), by name."""
        return dict(sorted(self._flags.items()))

    @property
    def inherited_flags(self):
        """Persistent flags declared by ancestors, by name."""
        inherited = {}
        for command in self.path[:-1]:
            inherited.update((name, flag) for name, flag in command._flags.items() if flag.persistent)
        return dict(sorted(inherited.items()))

    @property
    def visible_flags(self):
        """Every flag this command can parse: inherited persistent flags plus local ones."""
        return self.inherited_flags | self.local_flags

    # ── registration ────────────────────────────────────────────────────────

    def _ensure_open(self):
        if self._sealed:
            raise SealedCommandError(f"{type(self).__typename__} {self.name!r} is sealed")

    def add_group(self, *groups):
        """Register help-text groups; order defines the order of help sections."""
        self._ensure_open()
        for group in groups:
            if not isinstance(group, Group):
                raise TypeError(f"{type(self).__typename__} add_group() arguments must be groups")
            if any(group.id == other.id for other in self._groups):
                raise DuplicateGroupError(f"{type(self).__typename__} group id {group.id!r} is already in use")
            self._groups.append(group)
        return self

    def add(self, *children):
        """
        Attach subcommands, enforcing unique names, registered groups and unique flags.

        Every check runs before the child is linked, so a failed add leaves the tree untouched.
        """
        self._ensure_open()
        for child in children:
            if not isinstance(child, Command):
                raise TypeError(f"{type(self).__typename__} add() arguments must be commands")
            if child._parent is not None:
                raise ValueError(f"{type(self).__typename__} {child.name!r} already has a parent")
            if child is self or child in self.path:
                raise ValueError(f"{type(self).__typename__} {child.name!r} cannot be its own descendant")

            typeof = "subcommand" if self._parent else "command"
            for name in (child.name, *child._aliases):
                if self.lookup(name) is not None:
                    raise DuplicateCommandError(f"{type(self).__typename__} {typeof} name {name!r} is already in use")

            _resolve_group(self, child)
            _check_flags(child, {name: flag for name, flag in self.visible_flags.items() if flag.persistent})

            child._parent = self
            self._children[child.name] = child
        return self

    def command(self, source=Unset, /, *args, **kwargs):
        """Create a child command (directly or as a decorator) attached to this one."""
        return command(source, self, *args, **kwargs)

    def seal(self):
        """Freeze this command and its whole subtree."""
        self._sealed = True
        for child in self._children.values():
            child.seal()
        return self

    # ── dispatch ────────────────────────────────────────────────────────────

    def _takes_value(self, token, flags, shorthands):
        """Whether a flag token consumes the following token as its value."""
        if token.startswith("--"):
            name, eq, _ = token[2:].partition("=")
            flag = flags.get(name)
            return bool(flag) and not eq and not flag.boolean
        letters = token[1:]
        for index, letter in enumerate(letters):
            if (flag := shorthands.get(letter)) is None or letters[index + 1:].startswith("="):
                return False
            if not flag.boolean:
                return index == len(letters) - 1
        return False

    def _route(self, tokens):
        """
        Find the command addressed by the leading non-flag tokens.

        Returns the routed command and the tokens left for it to parse.
        """
        command = self
        remaining = []
        tokens = deque(tokens)
        positional = False
        while tokens:
            token = tokens.popleft()
            if token == "--":
                remaining.append(token)
                remaining.extend(tokens)
                break
            if token.startswith("-") and token != "-":
                remaining.append(token)
                flags = command.visible_flags
                shorthands = {flag.shorthand: flag for flag in flags.values() if flag.shorthand}
                if tokens and command._takes_value(token, flags, shorthands):
                    remaining.append(tokens.popleft())
                continue
            if not positional and (child := command.lookup(token)) is not None:
                command = child
                continue
            positional = True
            remaining.append(token)
        return command, remaining

    def _fail(self, fault):
        """
        Report a parsing fault on stderr, then raise it bound to this command.

        The report is "Error: <message>" followed by this command's usage, or by a
        one-line pointer to --help when no command matched.
        """
        report = f"Error: {fault}\n"
        if isinstance(fault, UnknownCommandError):
            report += f"Run '{self.command_path} --help' for usage.\n"
        else:
            report += render(self, self.suffix) + "\n"
        errors.file.write(report)
        trigger(fault, command=self)

    def _assign(self, flag, raw, values, changed):
        try:
            values[flag.name] = flag.convert(raw)
        except ValueError as exception:
            error = InvalidChoiceError if flag.choices else InvalidFlagValueError
            code = FaultCode.INVALID_CHOICE if flag.choices else FaultCode.INVALID_FLAG_VALUE
            self._fail(error(
                f'invalid argument "{raw}" for "{flag.label}" flag: {exception}',
                code=code,
                input=raw,
                flag=flag,
                hint=f"run '{self.command_path} --help' to see accepted values",
            ))
        changed.add(flag.name)

    def _parseargs(self, tokens):
        """
        Parse flags and positionals against every flag visible to this command.

        Returns (values, changed, args).
        """
        flags = self.visible_flags
        shorthands = {flag.shorthand: flag for flag in flags.values() if flag.shorthand}
        values = {name: flag.default for name, flag in flags.items()}
        changed = set()
        args = []
        hint = f"run '{self.command_path} --help' for usage"

        tokens = deque(tokens)
        while tokens:
            token = tokens.popleft()
            if token == "--":
                args.extend(tokens)
                break
            if token.startswith("--"):
                name, eq, raw = token[2:].partition("=")
                if (flag := flags.get(name)) is None:
                    self._fail(UnknownFlagError(
                        f"unknown flag: --{name}", code=FaultCode.UNKNOWN_FLAG, input=token, hint=hint,
                    ))
                if not eq:
                    if flag.boolean:
                        raw = "true"
                    elif tokens:
                        raw = tokens.popleft()
                    else:
                        self._fail(MissingFlagValueError(
                            f"flag needs an argument: {token}", code=FaultCode.MISSING_FLAG_VALUE, input=token, hint=hint,
                        ))
                self._assign(flag, raw, values, changed)
            elif token.startswith("-") and token != "-":
                letters = token[1:]
                while letters:
                    letter, letters = letters[0], letters[1:]
                    if (flag := shorthands.get(letter)) is None:
                        self._fail(UnknownFlagError(
                            f"unknown shorthand flag: '{letter}' in {token}",
                            code=FaultCode.UNKNOWN_FLAG, input=token, hint=hint,
                        ))
                    if letters.startswith("="):
                        raw, letters = letters[1:], ""
                    elif flag.boolean:
                        raw = "true"
                    elif letters:
                        raw, letters = letters, ""
                    elif tokens:
                        raw = tokens.popleft()
                    else:
                        self._fail(MissingFlagValueError(
                            f"flag needs an argument: '{letter}' in -{letter}",
                            code=FaultCode.MISSING_FLAG_VALUE, input=token, hint=hint,
                        ))
                    self._assign(flag, raw, values, changed)
            else:
                args.append(token)
        return values, changed, args

    def print_help(self):
        """Render the long description and usage of this command to stdout."""
        console.file.write(render_help(self))

    def _help(self, topic):
        """Built-in `help [command ...]`: print help for the addressed command."""
        command = self
        for name in topic:
            if (command := command.lookup(name)) is None:
                self._fail(UnknownHelpTopicError(
                    "unknown help topic \"%s\"" % " ".join(topic),
                    code=FaultCode.UNKNOWN_HELP_TOPIC,
                    input=list(topic),
                    hint=f"run '{self.command_path} --help' to see available commands",
                ))
        command.print_help()

    def _unknown(self, name):
        suggestions = difflib.get_close_matches(
            name, [child.name for child in self.commands if child.available], 5, 0.6,
        )
        message = f'unknown command "{name}" for "{self.command_path}"'
        if suggestions:
            message += "\n\nDid you mean this?\n" + "".join(f"\t{suggestion}\n" for suggestion in suggestions)
        self._fail(UnknownCommandError(
            message,
            code=FaultCode.UNKNOWN_COMMAND,
            input=name,
            suggestions=suggestions,
            hint=f"run '{self.command_path} --help' to see available commands",
        ))

    def __invoke__(self, argv):
        """
        Route argv to the deepest matching command, parse its flags and run it.

        Faults propagate as CommandException; the callback is never invoked after
        a parsing fault.
        """
        if not isinstance(argv, list | tuple | deque) or not all(isinstance(x, str) for x in argv):
            raise TypeError("__invoke__() argument must be a sequence of strings")

        command, tokens = self._route(argv)
        logger.debug("routed %r to %r", list(argv), command.command_path)
        values, changed, args = command._parseargs(tokens)

        if values.get(HELP):
            command.print_help()
            return
        if command._parent is None and args and args[0] == HELP and command.lookup(HELP) is None:
            command._help(args[1:])
            return
        if args and command._children and not command.runnable:
            command._unknown(args[0])
        if not command.runnable:
            command.print_help()
            return

        try:
            command._callback(Values(values, changed), tuple(args))
        except CommandException as exception:
            if "command" in exception.options:
                raise
            trigger(exception, command=command)
        except Exception as exception:
            raise DelegatedCommandError(
                str(exception) or type(exception).__name__,
                code=FaultCode.DELEGATED_ERROR,
                command=command,
            ) from exception


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator that builds one.

    - Direct callback:   cmd = command(func, parent, name="x")
    - Decorator:         @command(name="x", group="basic")
                         def func(values, args): ...
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, argv, /):
    """Run a command-like object (anything implementing __invoke__) against argv."""
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(argv)
    raise TypeError("invoke() first argument must implement __invoke__ method")


__all__ = (
    "Group",
    "Command",
    "command",
    "invoke",
)

del CommandType
