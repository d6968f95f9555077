# dashshell

A small interactive command shell. It reads a line, checks it for syntax
errors, expands variables, splits it into a pipeline and runs each command,
either as a builtin or as an external program found on `PATH`.

## Features

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `<`, `>`, `>>` and here-documents with `<<`
- Single and double quotes; `$NAME` and `$?` expansion
  (nothing is expanded inside single quotes)
- Builtins: `cd`, `echo` (with `-n`), `env`, `export` (including `KEY+=value`),
  `pwd`, `unset`, `exit`
- Syntax checks for unbalanced quotes, misplaced pipes and stray redirections
  (`Dash@Ameed: syntax error near unexpected` on standard error)
- `Ctrl-C` at the prompt starts a fresh line and sets the last status to 130;
  `Ctrl-\` is ignored; `Ctrl-D` leaves the shell

## Installation

```
pip install .
```

## Usage

Start the interactive shell:

```
dashshell
```

An example session:

```
Dash@Ameed$ export GREETING=hello
Dash@Ameed$ echo "$GREETING world" > out.txt
Dash@Ameed$ cat < out.txt | wc -c
12
Dash@Ameed$ echo $?
0
```

A lone `cd`, `export`, `unset` or `exit` runs inside the shell itself and so
changes its state; inside a pipeline these builtins work on a copy of the
environment. `exit` leaves the shell with the status of the last command.

Here-documents are read line by line with the prompt `heredoc > ` and stored
in files named `file_0`, `file_1`, ... in the current directory; these files
are left in place.

## Using it from Python

The shell can be driven without a terminal:

```python
from dashshell.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
status = shell.run_line("echo hi | tr a-z A-Z")
```

`Shell.loop(read_line)` runs lines from any callable that takes a prompt and
returns a line, or `None` at end of input; it returns the exit status.

The lower layers can be used on their own as well:

- `dashshell.parser.parse_line` turns a line into `Command` objects (each
  with `args` and a list of `Redirection`s) and raises `ShellSyntaxError`
  on bad input.
- `dashshell.expand.expand_line` performs variable expansion against an
  `Environment`.
- `dashshell.environment.Environment` holds the ordered `KEY=VALUE` entries;
  `resolve_path` looks a command up on its `PATH`.
- `dashshell.builtins.run_builtin` runs a builtin with explicit output streams.
- `dashshell.executor.Executor` runs parsed commands and keeps `last_status`.

## What it does not do

There are no `;`, `&&` or `||` lists, no subshells, no background jobs, no
globbing, no `~` expansion, no `2>` or other descriptor redirections, and no
scripts: the shell only reads commands one line at a time. `exit` takes no
status argument.

## Running the tests

```
pip install ".[test]"
pytest
```