"""
Configuration for Stage 2 (column selection, batching, LLM analysis)
Module-level defaults; the service layer overrides them from settings
"""

# --- Column selection -------------------------------------------------------

# Leading columns that identify the respondent (e.g. name, system ID)
DEFAULT_IDENTITY_COLUMN_COUNT = 3

# A column needs at least this many distinct answers to be worth analyzing
UNIQUE_VALUE_THRESHOLD = 10

# Admission policy names
POLICY_MARKER_SUBSTRING = 'marker-substring'
POLICY_BLACKLIST_PATTERN = 'blacklist-pattern'
DEFAULT_ADMISSION_POLICY = POLICY_MARKER_SUBSTRING

# marker-substring: keep only columns whose name contains one of these
# (free-text questions are exported as "...填空" / "..._text")
DEFAULT_COLUMN_MARKERS = ['text', '填空']

# blacklist-pattern: drop columns whose name matches any of these regexes
# (choice questions and respondent/organisation metadata)
DEFAULT_BLACKLIST_PATTERNS = [
    r'单选',
    r'多选',
    r'开始时间',
    r'结束时间',
    r'组织编码',
    r'组织信息',
    r'(?i)ucid',
    r'岗位名称',
    r'公司所在城市',
    r'工作所在城市',
    r'品牌',
    r'门店信息',
    r'条线',
    r'所属组织',
    r'(?i)single[\s_-]*choice',
    r'(?i)multiple[\s_-]*choice',
    r'(?i)start[\s_-]*time',
    r'(?i)end[\s_-]*time',
    r'(?i)org(anization|anisation)?[\s_-]*(code|info)',
    r'(?i)job[\s_-]*title',
    r'(?i)(company|work)[\s_-]*city',
    r'(?i)brand',
    r'(?i)store[\s_-]*info',
    r'(?i)business[\s_-]*line',
]

# --- Batching / LLM ---------------------------------------------------------

# Rows per narrative request; keeps each request inside the model context
DEFAULT_BATCH_SIZE = 300

DEFAULT_API_URL = 'https://api.deepseek.com/v1/chat/completions'
DEFAULT_MODEL = 'deepseek-reasoner'
DEFAULT_TEMPERATURE = 0.3

# --- Classification ---------------------------------------------------------

# Emit a progress event every N classified rows
CLASSIFICATION_PROGRESS_INTERVAL = 5

# Separators accepted between user-entered topic names
TOPIC_SEPARATORS = r'[、,，;；\n]'

# Inline markers written into results instead of raising
EMPTY_CONTENT_MARKER = 'empty content'
CLASSIFICATION_FAILED_MARKER = 'classification failed'
BATCH_FAILED_TEMPLATE = '[Batch {batch_number} analysis failed: {error}]'

# Report text for a column with no answers (no calls are made)
NO_ANSWERS_SUMMARY = 'No answers to analyze.'
