from .ledger_reader import SQLLedgerReader
