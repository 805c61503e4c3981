# poshprompt

Building blocks for a shell prompt. Every segment has two methods.
`enabled()` looks at the environment and returns whether the segment has
anything to show. `string()` returns the text to show.

## Segments

- `poshprompt.simple`
  - `Root` shows an icon when the process runs as root.
  - `PoshGit` shows the git status text from `POSH_GIT_STATUS`.
  - `Shell` shows the shell name. You can map names to your own text with `mapped_shell_names`.
  - `Terraform` shows the active terraform workspace.
  - `Text` shows the `text` option rendered as a template.
  - `Tempus` shows the current time. Set the format with `time_format`, using a layout such as `15:04:05`, or with a `template`.
  - `OsInfo` shows an icon or name for Windows, macOS, WSL or the Linux distribution.
- `poshprompt.path`
  - `PathSegment` shows the working directory in one of these `style` values: `agnoster`, `agnoster_full`, `agnoster_short`, `mixed`, `letter`, `full`, `short` or `folder`.
  - It can replace the home directory and `mapped_locations` with icons.
  - With `enable_hyperlink` it shows the directory as a link.
  - With `stack_count_enabled` it shows the directory stack count.
- `poshprompt.session`
  - `Session` shows the user and host names, with optional colours.
  - It marks SSH sessions with an icon.
  - With `display_default` set to false, it hides itself for the default user.
- `poshprompt.owm`
  - `Owm` shows a weather icon and the temperature from OpenWeatherMap. The options are `apikey`, `location` and `units`.
  - It can keep the response in the environment's cache for `cache_timeout` minutes.
- `poshprompt.media`
  - `Spotify` and `Ytm` (YouTube Music Desktop) show the artist and track that are playing.
  - A `PlayStatus` of playing, paused or stopped selects the icon.

## Properties and environment

A segment takes a `poshprompt.environment.Properties` and a
`poshprompt.environment.Environment`:

```python
from poshprompt.environment import Environment, Properties
from poshprompt.path import PathSegment

env = Environment(cwd="/home/me/projects/app", home="/home/me", path_separator="/")
segment = PathSegment(Properties({"style": "full"}), env)
print(segment.string())  # ~/projects/app
```

- `Properties` gives typed access to option values. When a value is missing or has the wrong type, you get the default you passed.
- Each fact that `Environment` reports can be fixed through its fields: working directory, home, environment variables, user, host, shell, platform, root, WSL, folders and window titles.
- Any fact you leave unset is read from the running machine.
- `Environment.do_get` fetches URLs over HTTP. Its timeout is in milliseconds.
- `MemoryCache` keeps values in memory, and each entry expires after the given number of minutes.
- `base(path, env)` returns the last element of a path.

## Templates

`poshprompt.gotemplate.TextTemplate` renders Go-style templates, for example:

```
{{ .UserName }}{{ if .SSHSession }} on {{ .ComputerName }}{{ end }}
```

- Templates support `if`/`else`/`with`/`range`, pipelines, and functions such as `contains`, `lower`, `upper`, `eq`, `ne`, `default` and `date`.
- `{{ .Env.NAME }}` reads an environment variable.
- `render()` raises `TemplateError` when a template cannot be parsed or executed.
- `go_time_format(moment, layout)` formats a `datetime` with a reference-time layout.

## What it does not do

- The package does not start other programs. `Environment.run_command` only returns output that was recorded in its `commands` mapping, and raises `CommandError` for anything else. The segments that need command output read it from that mapping:
  - `Terraform` for the workspace name.
  - `Spotify` on macOS and WSL.
  - `PathSegment` for WSL hyperlinks.
- There is no command-line tool.
- There is no configuration file loader.
- Nothing assembles segments into a complete prompt. You call the segments yourself.

## Tests

```
pip install -e .[test]
pytest
```