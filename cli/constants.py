"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["assign", "put", "put-form", "get", "delete", "lookup", "master", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#3FA34D bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;63;163;77m"
RESET = "\033[0m"

LOGO = rf"""{GREEN}
 __        __            _
 \ \      / /__  ___  __| |
  \ \ /\ / / _ \/ _ \/ _` |
   \ V  V /  __/  __/ (_| |
    \_/\_/ \___|\___|\__,_|
{RESET}"""

WELCOME_TITLE = "weedclient - blob storage cluster shell"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "weed> "

HELP_TEXT = """Available commands:
  assign [count=N] [collection=C] [replication=XYZ] [ttl=T] [dc=D]
                                      Request file ids from the master
  put <file> [mime=M] [collection=C] [replication=XYZ] [ttl=T]
                                      Upload a file as the raw request body
  put-form <file> [mime=M] [collection=C] [replication=XYZ] [ttl=T]
                                      Upload a file as a multipart form (keeps the filename)
  get <fid> [output_path]             Download a blob (defaults to ./<fid>)
  delete <fid>                        Delete a blob
  lookup <volume_id>                  Show the volume servers holding a volume
  master [host:port]                  Show or change the master address
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Replication is three digits: other data centers, other racks, same rack (e.g. 001).
TTL is a count and a unit m/h/d/w/M/y (e.g. 3d).
Examples:
  assign count=3 collection=photos
  put report.pdf
  put-form hello.txt mime=text/plain ttl=1d
  get 3,01637037d6 downloads/hello.txt
  delete 3,01637037d6
  lookup 3"""
