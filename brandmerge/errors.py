class BrandMergeError(Exception):
    """Base class for failures that abort a run."""


class OptionsError(BrandMergeError):
    pass


class CsvReadError(BrandMergeError):
    def __init__(self, label: str, reason: str):
        super().__init__(f"Error reading {label} CSV: {reason}")
        self.label = label
        self.reason = reason


class DatasetError(BrandMergeError):
    pass


class OutputError(BrandMergeError):
    pass
