# minishell

A small command shell. It reads command lines, expands variables and
runs commands. It can chain commands with pipes and redirect their input
and output.

## Installing

    pip install .

## Running

    minishell

The shell starts with the variables of the process environment.

When standard input is a terminal, the shell shows the prompt
`minishell🔥66🔥$ `. Lines you enter are added to the `readline`
history when that module is available. Ctrl+C does not stop the shell.
It prints a newline, and the next line you run sees an exit status of
130 in `$?`. Ctrl+\ is ignored. Ctrl+D prints `exit` and leaves the
shell.

When standard input is not a terminal, the shell reads commands one line
at a time. It shows no prompt:

    printf 'echo hello | cat\n' | minishell

The shell's own exit status is the status of the last line it ran, or
the status given to `exit`.

## What the shell understands

- **Words and quotes.** Nothing is expanded inside single quotes.
  `$NAME` is expanded inside double quotes. The shell removes the quotes
  before it runs the command. An unquoted word that expands to nothing
  is dropped. A quoted empty word such as `""` is kept as an empty
  argument.
- **Variables.** `$NAME` is replaced by the variable's value, or by
  nothing if the variable is not set. `$?` is replaced by the exit
  status of the previous line. A `$` directly before a quote at the
  start of a word is dropped, so `$"text"` gives `text`.
- **Pipes.** `cmd1 | cmd2 | ...` runs all the stages at the same time.
  Each stage gets its own copy of the variables. Because of this,
  `cd`, `export`, `unset` and `exit` inside a pipeline do not affect the
  shell. The status of a pipeline is the status of its last stage.
- **Redirections.**
  - `< file` reads input from a file.
  - `> file` writes output to a file and replaces its contents.
  - `>> file` appends output to a file.
  - `<< DELIM` reads a here-document up to a line that is exactly
    `DELIM`. It reads from the shell's standard input. In a later stage
    of a pipeline, it reads from the pipe instead.

  When a command has several redirections of the same direction, the
  last one wins. If a file cannot be opened, the command is not run and
  its status is 1.
- **Syntax errors.** The shell reports a syntax error, and the line's
  status is 2, in these cases:
  - a quote is left open;
  - a line starts or ends with a pipe;
  - two pipes appear in a row;
  - a redirection is not followed by a word.
- **Built-in commands.**
  - `echo` prints its arguments, separated by spaces. It accepts `-n`
    and repeated forms such as `-nnn`.
  - `cd DIR` changes directory and updates `PWD` and `OLDPWD`. Without
    an argument it reports `cd: missing argument`.
  - `pwd` prints the current directory.
  - `export NAME=value` sets a variable, and `export NAME+=value`
    appends to it. An invalid name is reported and gives status 1. With
    no arguments, `export` lists the variables the way `env` does.
  - `unset NAME ...` removes variables.
  - `env` lists the variables, one `NAME=value` per line.
  - `exit [N]` leaves the shell with status `N` modulo 256.
    - A non-numeric or out-of-range `N` leaves with status 2.
    - More than one argument reports an error, gives status 1, and does
      not leave the shell.
- **Other commands.** Any other command is looked up in the directories
  listed in `PATH`. If `PATH` is not set, the current directory is
  searched. A command that contains `/` is used as given.
  - A command that is not found gives status 127.
  - A file that exists but cannot be run gives status 126.
  - A program killed by a signal gives status 1.

## What it does not do

The shell has no `;`, `&&` or `||`, no background jobs, no job control,
no `~` or wildcard expansion, and no redirection of standard error.

## Using it from Python

The stages of the shell are separate functions:

- `minishell.lexer.lex` checks and splits a line into tokens, and
  expands variables. It raises `LexerError` on a syntax error.
- `minishell.parser.parse_commands` groups tokens into `Command`
  objects.
- `minishell.executor.execute_command_list` runs the commands and
  returns a status.
- `minishell.shell.run_line` does all three for one line.
- `minishell.shell.run_loop` runs lines from a stream until the end of
  input or `exit`.

For example:

    import io

    from minishell.environment import Environment
    from minishell.shell import run_line, run_loop

    env = Environment.from_envp(["PATH=/usr/bin:/bin", "GREETING=hi"])
    status = run_line("echo $GREETING", env, 0)

    status = run_loop(env, io.StringIO("export X=1\necho $X\nexit 3\n"))

`run_line` lets the `ShellExit` exception raised by `exit` propagate.
Its `status` attribute holds the requested exit status.

## Running the tests

    pip install '.[test]'
    pytest