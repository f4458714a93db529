"""
Configuration for the survey workbook reader
"""

# Upload gating: only Excel workbooks are accepted
ALLOWED_EXTENSIONS = ['.xlsx', '.xls']

# Only the first sheet of a workbook is read
SHEET_INDEX = 0

# Cell values that mean "the respondent gave no answer"
# Survey platforms export skipped questions as "(空)"
NO_ANSWER_SENTINELS = ['(空)', 'no answer']
