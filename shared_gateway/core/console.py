"""
Human-facing console output.

Everything is written to stderr; stdout is reserved for the patched template.
"""

import sys

RESET = "\033[0m"
BOLD = "\033[1m"
UNDERLINE = "\033[4m"
YELLOW = "\033[93m"

# level -> (colour, marker)
_LEVELS = {
    "info": ("\033[96m", "ℹ"),
    "success": ("\033[92m", "✅"),
    "warning": (YELLOW, "⚠️"),
    "error": ("\033[91m", "❌"),
    "step": ("\033[94m" + BOLD, "➜"),
}


def _emit(level: str, msg: str) -> None:
    colour, marker = _LEVELS[level]
    print(f"{colour}{marker} {msg}{RESET}", file=sys.stderr)


def info(msg: str):
    _emit("info", msg)


def success(msg: str):
    _emit("success", msg)


def warning(msg: str):
    _emit("warning", msg)


def error(msg: str):
    _emit("error", msg)


def step(msg: str):
    _emit("step", msg)


def summary(name: str | None, gateway_id: str | None, attachment_id: str | None = None):
    """
    Print the shared gateway summary block.

    Shared API Gateway Summary
    Name
      <name>
    ID
      <gateway id>
    Parent Resource ID
      <attachment id>

    Fields without a value are left out, except the name.
    """
    fields = [("Name", name), ("ID", gateway_id), ("Parent Resource ID", attachment_id)]
    lines = [f"{YELLOW}{UNDERLINE}Shared API Gateway Summary{RESET}"]
    for label, value in fields:
        if value is None and label != "Name":
            continue
        lines.append(f"{YELLOW}{label}{RESET}")
        lines.append(f"  {value}")
    sys.stderr.write("\n".join(lines) + "\n")
