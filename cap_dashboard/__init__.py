from .models import Shareholder, FundingRound, RoundSummary, Investment, ShareClass, Esop, Loan
from .aggregation import ownership_percentage, share_value, share_percentage, round_total_row, RoundTotals
from .export import investments_to_csv, export_investments, CsvExport
from .selector import RoundSelector, SelectorState, FetchTicket, NO_SELECTION
from .loader import DataLoader, CapTableState, LoadResult, FOUNDATION, REGULAR
from .notices import Notice
from .utils import _as_float, money_fmt, shares_fmt, percent_fmt
