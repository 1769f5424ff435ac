"""Logging setup and tabular run logs.

:func:`configure_logging` wires the ``efactura`` logger hierarchy for the
command line tools. :class:`ExcelLogger` records one row per processed
invoice in a workbook so that batch runs can be reviewed afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Protocol, Sequence

LOGGER_NAME = "efactura"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger (``efactura.<name>``)."""

    return logging.getLogger(LOGGER_NAME).getChild(name)


def configure_logging(
    level: int = logging.INFO, log_file: Path | None = None
) -> logging.Logger:
    """Attach a stream handler and, optionally, a rotating file handler."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT)

    if not any(type(handler) is logging.StreamHandler for handler in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file is not None and not any(
        isinstance(handler, RotatingFileHandler) for handler in logger.handlers
    ):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=1_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    logging.captureWarnings(True)
    return logger


class RowLike(Protocol):
    """Protocol for rows serialisable in tabular form."""

    def as_cells(self) -> Iterable[str]:
        """Return the ordered values written to the sheet."""


@dataclass(slots=True)
class ExcelLoggerConfig:
    """Configuration used by :class:`ExcelLogger`.

    Rows whose ``highlight_column`` cell holds one of ``highlight_values`` are
    filled in red, so blocking problems stand out among warnings.
    """

    columns: Sequence[str]
    filename: str = "efactura-report.xlsx"
    sheet_title: str = "Log"
    highlight_column: str | None = None
    highlight_values: frozenset[str] = frozenset()


_HIGHLIGHT_COLOR = "FFC7CE"
_MAX_COLUMN_WIDTH = 80


class ExcelLogger:
    """Write run logs to Excel using :mod:`openpyxl`.

    Every call to :meth:`write_rows` creates a new workbook: a bold, frozen
    header row from :class:`ExcelLoggerConfig`, the given rows, and column
    widths fitted to the longest value.
    """

    def __init__(self, config: ExcelLoggerConfig) -> None:
        self.config = config

    def write_rows(self, rows: Iterable[RowLike | Iterable[str]]) -> Path:
        """Persist ``rows`` to the configured workbook and return its path."""

        from openpyxl import Workbook
        from openpyxl.styles import Font, PatternFill
        from openpyxl.utils import get_column_letter

        config = self.config
        destination = Path(config.filename)
        destination.parent.mkdir(parents=True, exist_ok=True)

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = config.sheet_title

        columns = list(config.columns)
        if columns:
            worksheet.append(columns)
            for cell in worksheet[1]:
                cell.font = Font(bold=True)
            worksheet.freeze_panes = "A2"

        highlight_index = None
        if config.highlight_column is not None and config.highlight_column in columns:
            highlight_index = columns.index(config.highlight_column)
        fill = PatternFill(
            fill_type="solid", start_color=_HIGHLIGHT_COLOR, end_color=_HIGHLIGHT_COLOR
        )

        widths: dict[int, int] = {index: len(str(name)) for index, name in enumerate(columns)}
        for row in rows:
            if hasattr(row, "as_cells"):
                cells = list(row.as_cells())  # type: ignore[union-attr]
            else:
                cells = list(row)  # type: ignore[arg-type]
            worksheet.append(cells)

            for index, value in enumerate(cells):
                length = len(str(value)) if value is not None else 0
                widths[index] = max(widths.get(index, 0), length)
            if (
                highlight_index is not None
                and highlight_index < len(cells)
                and cells[highlight_index] in config.highlight_values
            ):
                for cell in worksheet[worksheet.max_row]:
                    cell.fill = fill

        for index, width in widths.items():
            letter = get_column_letter(index + 1)
            worksheet.column_dimensions[letter].width = min(width + 2, _MAX_COLUMN_WIDTH)

        workbook.save(destination)
        return destination


__all__ = [
    "ExcelLogger",
    "ExcelLoggerConfig",
    "LOGGER_NAME",
    "RowLike",
    "configure_logging",
    "get_logger",
]
