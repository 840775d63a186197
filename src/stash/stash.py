"""stash

Usage:
    stash list [options]
    stash push [<name>] [-a] [options]
    stash store <name> [-a] [options]
    stash show [<id>] [-d] [options]
    stash pop [<name>] [options]
    stash delete [<id>] [options]
    stash clear [options]
    stash (-h | --help)
    stash --version

    echo hello | stash push greeting    (stash something)
    stash show greeting:0               (get it back)

Identifiers are written name:index (or name.index), leave out the index to
get the newest entry of a name and leave out the name for the anonymous stack.

Options:
    -h --help              show this screen.
    --version              show version.
    -a --append            append to the newest (or the given) entry instead of pushing a new one.
    -d --delete            delete the entry once it has been shown.
    --data-dir=<dir>       directory the stashes are kept in.
    --config=<file>        JSON config file to read settings from.
    --log-level=<level>    logging level (DEBUG, INFO, WARNING, ERROR).
    --no-color             don't colorize messages.
"""
import os
import sys

from docopt import docopt
from rich.markup import escape

from stash import __version__
from .errors import InvalidIdentifier, NotFound, StashError, StashIOError
from .identifier import StashId, format_id, parse_id
from .stash_config import Settings, conf_get, load_config
from .store import StashStore
from .util import file_util, log

version = __version__
EXIT_OK = 0
EXIT_FAILED = 1


def cli_settings(arguments):
    return {
        Settings.DATA_DIR.key: arguments.get("--data-dir"),
        Settings.CONFIG.key: arguments.get("--config"),
        Settings.LOG_LEVEL.key: arguments.get("--log-level"),
        Settings.COLORIZE.key: False if arguments.get("--no-color") else None,
    }


def configure_logging(conf):
    log.set_colorize(conf_get(conf, Settings.COLORIZE))
    log.set_default_level(conf_get(conf, Settings.LOG_LEVEL))


def list_stashes(store, out):
    # newest last, so it ends up closest to the prompt
    for entry in reversed(store.list()):
        line = f"{entry.id}: {file_util.format_timestamp(entry.created)}\n"
        out.write(line.encode("utf-8"))
    out.flush()


def push_stash(store, stash_id: StashId, data_in, append=False):
    name, index = stash_id
    if append:
        index = store.append(name, data_in, index)
        log.info(f"Appended to [b]{escape(format_id(name, index))}[/b]")
    else:
        if index is not None:
            raise InvalidIdentifier(
                f"Can't pick the index of a new stash ({stash_id}), it's always the next free one"
            )
        index = store.push(name, data_in)
        log.info(f"Stashed [b]{escape(format_id(name, index))}[/b]")
    return index


def show_stash(store, stash_id: StashId, out, delete=False):
    entry = store.resolve(stash_id)
    with store.open_entry(entry.name, entry.index) as fp:
        try:
            file_util.copy_stream(fp, out)
        except OSError as e:
            # nothing gets deleted when the entry didn't make it out in one piece
            raise StashIOError("copy", f"{entry.path} to output", e) from e
    if delete:
        store.delete(entry.name, entry.index)
        log.debug(f"Deleted {escape(entry.id)}")
    return entry


def delete_stash(store, stash_id: StashId):
    entry = store.delete(*stash_id)
    log.info(f"Deleted [b]{escape(entry.id)}[/b]")
    return entry


def clear_stashes(store):
    removed = store.clear()
    log.info(f"Removed {removed} file(s)")
    return removed


def execute(arguments, store, data_in, out):
    separators = store.separators
    if arguments.get("list"):
        list_stashes(store, out)
    elif arguments.get("push") or arguments.get("store"):
        stash_id = parse_id(arguments.get("<name>") or "", separators)
        push_stash(store, stash_id, data_in, append=arguments.get("--append"))
    elif arguments.get("show"):
        stash_id = parse_id(arguments.get("<id>") or "", separators)
        show_stash(store, stash_id, out, delete=arguments.get("--delete"))
    elif arguments.get("pop"):
        stash_id = parse_id(arguments.get("<name>") or "", separators)
        show_stash(store, stash_id, out, delete=True)
    elif arguments.get("delete"):
        stash_id = parse_id(arguments.get("<id>") or "", separators)
        delete_stash(store, stash_id)
    elif arguments.get("clear"):
        clear_stashes(store)


def run(argv=None, data_in=None, out=None, environ=None):
    arguments = docopt(__doc__, argv=argv, version=f"stash {version}")
    data_in = data_in if data_in is not None else sys.stdin.buffer
    out = out if out is not None else sys.stdout.buffer
    environ = environ if environ is not None else os.environ

    try:
        conf = load_config(cli_settings(arguments), environ)
    except (ValueError, OSError) as e:
        log.error(f"[red]Configuration error:[/red] {escape(str(e))}")
        return EXIT_FAILED
    configure_logging(conf)
    log.debug(f"data dir: {escape(str(conf_get(conf, Settings.DATA_DIR)))}")

    try:
        store = StashStore.open(conf_get(conf, Settings.DATA_DIR), conf_get(conf, Settings.SEPARATORS))
        execute(arguments, store, data_in, out)
    except NotFound as e:
        log.warning(escape(str(e)))
        return e.exit_code
    except StashError as e:
        log.error(f"[red]{escape(str(e))}[/red]")
        return e.exit_code

    return EXIT_OK


def run_stash():
    sys.exit(run())


if __name__ == "__main__":
    run_stash()
