# deskmenu

Building blocks for a dmenu-style application launcher driven by XDG
`.desktop` files: parsing entries, ranking them by data directory, keeping a
usage history, feeding a menu program and starting the chosen application's
command line.

## Modules

- `deskmenu.application` – `Application.from_file(path, locale_suffixes,
  desktopenvs)` parses the `[Desktop Entry]` section of a file into an
  `Application` dataclass (`name`, `generic_name`, `exec`, `path`,
  `location`, `terminal`, `id`). Localized `Name[..]` and `GenericName[..]`
  keys are chosen by the best match reported by `locale_suffixes`.
  `Hidden=true`, `NoDisplay=true`, and `OnlyShowIn`/`NotShowIn` that exclude
  one of `desktopenvs` raise `DisabledError` (an empty `desktopenvs` ignores
  `OnlyShowIn`/`NotShowIn`). Invalid escape sequences raise `EscapeError`;
  malformed key lines raise `ValueError`. The helpers `convert_escape`,
  `expand` and `expand_list` resolve escapes in single and `;`-separated
  values.
- `deskmenu.formatters` – turn an entry name into a menu line:
  `format_default` (the name), `format_with_binary_name` (`"Name (cmd)"` with
  the first word of `Exec`) and `format_with_base_binary_name` (the same with
  only the base name of the command).
- `deskmenu.runner` – `application_command(app, args)` expands the field codes
  of `Exec`: `%f %F %u %U` become the space-separated `args`, each
  double-quoted for the shell; `%c` the name; `%k` the file location; `%%` a
  percent sign; `%i %d %D %n %N %v %m` are dropped. Unknown or trailing field
  codes raise `ValueError`. Trailing spaces are stripped.
- `deskmenu.app_manager` – `AppManager(files, desktopenvs, locale_suffixes)`
  takes a list of `DesktopFileRank(base_path, files)`; the list position is
  the rank, and lower ranks win desktop file ID and name collisions. It
  supports `add(filename, base_path, rank)`, `remove(filename, base_path)`,
  `len()`, `name_mapping()` (a read-only mapping of names to
  `ResolvedApplication(app, is_generic)`), `lookup_by_id(desktop_id)`
  (returns `None` when unknown) and `check_inner_state()`. Bookkeeping errors
  raise `InconsistentStateError`. `get_desktop_id(filename, base)` turns a
  path below `base` into a desktop file ID (slashes become dashes).
- `deskmenu.history` – `HistoryManager(path)` reads or creates a versioned
  history file (a header line with version 1.0 followed by `count,name`
  lines). `increment(name)` adds one use and rewrites the file at once,
  `remove_obsolete_entry(name)` drops an entry (raising `KeyError` if absent),
  `view()` returns `(count, name)` tuples most used first, and `filename`
  gives the path. A file in the older header-less `count,desktop-id` format
  raises `V0VersionError`; `HistoryManager.convert_history_from_v0(path,
  app_manager)` rewrites it using the manager's `lookup_by_id`. Other problems
  raise `HistoryError`.
- `deskmenu.file_finder` – `find_files(path)` walks a directory tree,
  skipping names that start with a dot, and yields `FoundEntry(path, is_dir)`
  items. `path` should end with a slash.
- `deskmenu.dmenu` – `Dmenu(command, shell)` runs a menu program through
  `shell -c command`: `run()`, `write(entry)` for each line, `display()` to
  close the input, and `read_choice()` for the selected line (an empty string
  when the program exits with a non-zero status). Failures raise
  `DmenuError`.
- `deskmenu.i3exec` – `get_ipc_socket_path()` asks `i3 --get-socketpath`,
  `exec_command(command, socket_path)` sends a RUN_COMMAND message over the
  i3 IPC socket and raises `I3Error` if i3 reports a failure.
  `build_payload` and `read_json_string` are the message and reply helpers.
- `deskmenu.notify` – `NotifyBase`, an abstract interface (`fileno()`,
  `get_changes()`) for watchers that report changed desktop files as
  `FileChange(rank, name, status)` records with a `ChangeType`.

## Example

```python
from deskmenu.app_manager import AppManager, DesktopFileRank
from deskmenu.dmenu import Dmenu
from deskmenu.formatters import format_default
from deskmenu.runner import application_command


class AnyLocale:
    def match(self, locale):
        return -1  # use only unlocalised names


base = "/usr/share/applications/"
files = [DesktopFileRank(base, [base + "firefox.desktop"])]
manager = AppManager(files, [], AnyLocale())

menu = Dmenu("dmenu -i", "/bin/sh")
menu.run()
names = manager.name_mapping()
for name, resolved in names.items():
    menu.write(format_default(name, resolved.app))
menu.display()
choice = menu.read_choice()
if choice in names:
    print(application_command(names[choice].app, ""))
```

`locale_suffixes` is any object with a `match(locale)` method returning the
match quality (0 best, 3 worst) or -1 for no match.

## What this package does not do

- It has no command-line program; it is a library to build a launcher from.
- It does not compute locale suffixes from the environment; the caller
  supplies the `match(locale)` object.
- It does not search the XDG data directories itself; the caller lists the
  desktop files (for instance with `find_files`) and passes them ranked.
- `NotifyBase` is only an interface; no file watcher implementation is
  included.
- It does not start the chosen application; `application_command` only
  builds the shell command line (or `exec_command` hands it to i3).

## Tests

```
pip install -e .[test]
pytest
```