from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from escpos.printer import Dummy

from .models import PrinterConfig

DEFAULT_LINE_WIDTH = 42  # font A on 80mm paper

Directive = Tuple  # ("line", "text"), ("align", "center"), ("cut",) ...


def encode_directives(directives: Iterable[Directive], line_width: int = DEFAULT_LINE_WIDTH) -> bytes:
    """
    Turn a sequence of formatting directives into ESC/POS bytes.

    Supported directives:
        ("initialize",)         ESC @
        ("align", "left"|"center"|"right")
        ("bold", True|False)
        ("line", text)          text followed by a newline
        ("rule",)               a full-width line of dashes
        ("newline",)
        ("cut",)                full cut (feeds past the cutter first)

    Rendering happens in python-escpos; ``Dummy`` collects the output
    instead of talking to hardware.
    """
    p = Dummy()
    align = "left"
    bold = False

    for directive in directives:
        op = directive[0]
        if op == "initialize":
            p.hw("INIT")
            align, bold = "left", False
        elif op == "align":
            align = str(directive[1]).lower()
            p.set(align=align, bold=bold)
        elif op == "bold":
            bold = bool(directive[1])
            p.set(align=align, bold=bold)
        elif op == "line":
            p.textln(str(directive[1]))
        elif op == "rule":
            p.textln("-" * max(1, int(line_width)))
        elif op == "newline":
            p.ln()
        elif op == "cut":
            p.cut()
        else:
            raise ValueError(f"Unknown encoder directive: {op!r}")

    return p.output


def diagnostic_directives(cfg: Optional[PrinterConfig], now: Optional[datetime] = None) -> List[Directive]:
    """The test page: title, rule, timestamp, connection type and a cut."""
    now = now or datetime.now()
    kind = cfg.kind if cfg is not None else "Unknown"
    return [
        ("initialize",),
        ("align", "center"),
        ("bold", True),
        ("line", "TEST PRINT"),
        ("bold", False),
        ("rule",),
        ("align", "left"),
        ("line", f"Date: {now:%Y-%m-%d %H:%M:%S}"),
        ("line", f"Connection Type: {kind}"),
        ("newline",),
        ("align", "center"),
        ("line", "If you can read this,"),
        ("line", "printer is working correctly!"),
        ("newline",),
        ("newline",),
        ("cut",),
    ]


def build_test_payload(cfg: Optional[PrinterConfig] = None, line_width: int = DEFAULT_LINE_WIDTH) -> bytes:
    return encode_directives(diagnostic_directives(cfg), line_width=line_width)
