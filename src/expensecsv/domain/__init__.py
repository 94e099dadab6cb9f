"""Domain layer for expensecsv: entities, errors, chunk scheduling and the CSV engines.

Services are imported from their modules (``expensecsv.domain.csv_import``
and friends); importing them here would make ``expensecsv.config`` circular.
"""
