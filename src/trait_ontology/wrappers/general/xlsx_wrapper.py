"""Read and write trait workbooks as xlsx files."""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, Iterator, List

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from trait_ontology.formats.workbook import WorkbookTable
from trait_ontology.wrappers.base_wrapper import BaseWrapper

logger = logging.getLogger(__name__)

ROW = Dict[str, Any]


@dataclass
class XLSXWrapper(BaseWrapper):
    """
    A wrapper over an Excel workbook, one table per worksheet.

    The first row of each worksheet is its header.
    """

    name: ClassVar[str] = "xlsx"

    error_font: ClassVar[Font] = Font(bold=True, color="FF0000")
    error_fill: ClassVar[PatternFill] = PatternFill(fill_type="solid", fgColor="000000")

    worksheet_name: str = None

    def objects(self, **kwargs) -> Iterator[ROW]:
        """
        Yield the rows of ``worksheet_name`` as header -> value mappings.

        :return:
        """
        logger.info(f"Loading {self.source_locator}/{self.worksheet_name}")
        yield from self.read_tables()[self.worksheet_name]

    def read_tables(self) -> Dict[str, List[ROW]]:
        """
        Read every worksheet into a list of header -> value rows.

        :return: worksheet name -> rows
        """
        logger.info(f"Reading Trait Workbook File [{self.source_locator}]")
        wb = load_workbook(self.source_locator, read_only=True, data_only=True)
        tables = {}
        try:
            for ws in wb.worksheets:
                rows = ws.iter_rows(values_only=True)
                header = next(rows, None) or ()
                tables[ws.title] = [
                    {h: v for h, v in zip(header, row) if h is not None} for row in rows
                ]
        finally:
            wb.close()
        return tables

    def write_tables(self, tables: Iterable[WorkbookTable]) -> None:
        """
        Write each table to its own worksheet, highlighting marked cells.

        :param tables:
        :return:
        """
        wb = Workbook()
        wb.remove(wb.active)
        for table in tables:
            ws = wb.create_sheet(table.name)
            ws.append(table.headers)
            for row in table.rows:
                ws.append(row)
            for marker in table.markers:
                logger.debug(f"Marking {len(marker.rows)} {marker.kind} cells in [{table.name}]")
                self.mark_cells(ws, marker.column, marker.rows)
        logger.info(f"Writing Trait Workbook File [{self.source_locator}]")
        wb.save(self.source_locator)

    def mark_cells(self, ws: Worksheet, column: int, rows: Iterable[int]) -> None:
        """
        Highlight cells of one column.

        :param ws:
        :param column: 0-based column index
        :param rows: 0-based data row indexes (the header row is skipped)
        :return:
        """
        for row in rows:
            cell = ws.cell(row=row + 2, column=column + 1)
            cell.font = self.error_font
            cell.fill = self.error_fill
