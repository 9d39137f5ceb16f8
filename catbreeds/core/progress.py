"""
Progress bar for image enrichment using the Rich library.

Only the full-catalog initialization is slow enough to deserve a bar:
one image lookup per breed. Paginated and search calls enrich at most a
page of breeds and run without one.

Usage:
    from catbreeds.core.progress import EnrichmentProgressBar

    with EnrichmentProgressBar(total=67) as progress:
        engine.initialize_app_data(progress=progress)
"""

import threading
from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.progress import BarColumn, Progress, ProgressColumn, Task, TaskID
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Text column truncated with ellipsis when it exceeds a fixed width.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        text = Text.from_markup(
            self.text_format.format(task=task), style=self.style, justify=self.justify
        )
        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class EnrichmentProgressBar:
    """
    Progress bar for per-breed image lookups.

    Displays:
    - Description (e.g., "Images")
    - Status: ✓ resolved, ✗ missing (lookup failed or no reference image)
    - Bar and percentage

    Example:
        Images          ✓ 61  ✗ 6              ━━━━━━━━━━━━━━━━━  100%

    update() is called from enrichment worker threads and is serialized
    with an internal lock.
    """

    def __init__(self, total: int, description: str = "Images") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.resolved = 0
        self.missing = 0
        self._lock = threading.Lock()

        self.console = get_console()

        self.progress = Progress(
            SizedTextColumn("[white]{task.description}", overflow="ellipsis", width=15),
            SizedTextColumn("{task.fields[status]}", width=25, style="white"),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "EnrichmentProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if not self._started:
            self.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def set_total(self, total: int) -> None:
        """Reset the expected count once the catalog size is known."""
        with self._lock:
            self.total = total
            if self.task_id is not None:
                self.progress.update(self.task_id, total=total)

    def _get_status_text(self) -> str:
        return f"[green]✓ {self.resolved}[/green]  [red]✗ {self.missing}[/red]"

    def update(self, resolved: bool) -> None:
        """
        Record one finished breed.

        Args:
            resolved: True if the breed ended up with an image.
        """
        with self._lock:
            self.completed += 1
            if resolved:
                self.resolved += 1
            else:
                self.missing += 1
            if self.task_id is not None:
                self.progress.update(
                    self.task_id,
                    completed=self.completed,
                    status=self._get_status_text(),
                )
