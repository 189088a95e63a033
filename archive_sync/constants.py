"""
Fixed values shared across the sync tool.
"""

SOCKET_YML_FILENAME = "socket.yml"
SOCKET_YML_CONTENT = """version: 2
githubApp:
  enabled: false
"""
COMMIT_MESSAGE = "Add Socket.yml configuration for security scanning"
DEFAULT_MAIN_BRANCH = "main"

# Retry policy
MAX_RETRIES = 3
RETRY_BASE_DELAY_MS = 1000
RETRY_MAX_DELAY_MS = 30_000

# Timeouts (seconds)
GIT_CLONE_TIMEOUT = 300
GIT_PUSH_TIMEOUT = 60
GIT_COMMAND_TIMEOUT = 60
API_TIMEOUT = 30

LOG_LEVELS = ("debug", "info", "warn", "error")
DEFAULT_LOG_LEVEL = "info"
LOG_FILE_PREFIX = "repo-sync"
LOG_DIRECTORY = "./logs"
TEMP_REPOS_DIRECTORY = "./temp-repos"

DEFAULT_GITHUB_BASE_URL = "https://api.github.com"
DEFAULT_SOCKET_BASE_URL = "https://api.socket.dev/v0"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_PAGE_SIZE = 100

SOCKET_CLI_BINARY = "socket"
GIT_BINARY = "git"

# Pipeline step names, in execution order
STEP_UNARCHIVE = "Unarchive"
STEP_CLONE = "Clone"
STEP_CREATE_FILE = "Create socket.yml"
STEP_STAGE = "Stage"
STEP_COMMIT = "Commit"
STEP_DELETE_SCAN = "Delete Socket.dev repository"
STEP_PUSH = "Push"
STEP_REARCHIVE = "Rearchive"

PIPELINE_STEPS = (
    STEP_UNARCHIVE,
    STEP_CLONE,
    STEP_CREATE_FILE,
    STEP_STAGE,
    STEP_COMMIT,
    STEP_DELETE_SCAN,
    STEP_PUSH,
    STEP_REARCHIVE,
)
