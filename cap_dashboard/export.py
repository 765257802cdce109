from __future__ import annotations
import csv
import io
from dataclasses import dataclass
from typing import Optional, Sequence
import pandas as pd
from .aggregation import DETAIL_COLUMNS
from .models import Investment
from .notices import Notice
from .utils import plain_number

CSV_MIME = "text/csv"


@dataclass
class CsvExport:
    file_name: str
    content: str
    rows: int
    mime: str = CSV_MIME

    def downloaded_notice(self) -> Notice:
        return Notice("success", "Export successful", f"{self.file_name} has been downloaded")


def investments_dataframe(investments: Sequence[Investment]) -> pd.DataFrame:
    rows = [{
        "Shareholder": inv.shareholder_label,
        "Number of Shares": plain_number(inv.number_of_shares or 0),
        "Share Price": plain_number(inv.share_price or 0),
        "Share Class": inv.share_class_label,
        "Capital Invested": plain_number(inv.capital_invested or 0),
    } for inv in investments]
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS, dtype=str)


def investments_to_csv(investments: Sequence[Investment]) -> str:
    buf = io.StringIO()
    investments_dataframe(investments).to_csv(buf, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return buf.getvalue()


def export_investments(investments: Sequence[Investment], stem: str) -> Optional[CsvExport]:
    if not investments:
        return None
    return CsvExport(file_name=f"{stem}.csv", content=investments_to_csv(investments), rows=len(investments))
