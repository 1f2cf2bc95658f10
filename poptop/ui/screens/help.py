"""Modal screen describing each metric and the key bindings."""

import logging
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Static

logger = logging.getLogger(__name__)

HELP_TEXT = """\
[b]What's going on with my local system?[/b]
poptop charts system metrics over a time window to give an at-a-glance summary of recent activity.

[b]CPU Load (1min, 5min, 15min)[/b]
Roughly how many processes are executing or waiting to execute on a CPU. Load above the number of cores means processes are waiting.

[b]CPU (%) (min, avg, max)[/b]
Minimum, average and maximum busy percentage across all cores.

[b]Network IO (KiB/s) (send, recv)[/b]
Throughput on the interface that has received the most data since boot. The chart starts over if a different interface takes the lead.

[b]Disk IOPS (read, write)[/b]
Disk operations per second, summed over all disks.

[b]Disk IO (KiB/s) (read, write)[/b]
Disk throughput, summed over all disks.

[b]Top CPU / Top Memory Processes (%, pid, command)[/b]
Heaviest processes by CPU or memory, sampled four times less often than the charts.

[b]Keys[/b]
  1-7  show/hide load, cpu, network, disk-iops, disk-io, top-cpu, top-mem
  t    toggle tile mode
  o    toggle split orientation
  ?    this help
  q    quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal screen with metric descriptions."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 80%;
        height: 80%;
        padding: 1 2;
        background: $surface;
        border: round $primary;
    }

    #help-dialog Button {
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("question_mark", "close", "Close", show=False),
        Binding("q", "close", "Close", show=False),
    ]

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.info("HelpScreen opened")

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            with VerticalScroll():
                yield Static(HELP_TEXT, id="help-text")
            yield Button("Close (esc)", variant="primary", id="close-btn")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        logger.info("HelpScreen closed via keyboard")
        self.dismiss(None)
