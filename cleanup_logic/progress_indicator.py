"""
Provides step progress and colored terminal output for the stack cleanup script.
"""


class Colors:
    """ANSI color codes for terminal output"""

    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


class ProgressIndicator:
    """Numbered step output for the teardown of a single stack"""

    def __init__(self, total_steps: int):
        self.total_steps = total_steps
        self.current_step = 0

    def header(self, title: str):
        self.current_step = 0
        print(f"\n{Colors.HEADER}{Colors.BOLD}=== {title} ==={Colors.ENDC}")

    def next_step(self, description: str):
        self.current_step += 1
        print(
            f"{Colors.OKBLUE}  Step {self.current_step}/{self.total_steps}: "
            f"{description}{Colors.ENDC}"
        )

    def success(self, message: str):
        print(f"{Colors.OKGREEN}  [OK] {message}{Colors.ENDC}")

    def warning(self, message: str):
        print(f"{Colors.WARNING}  [WARNING] {message}{Colors.ENDC}")

    def info(self, message: str):
        print(f"{Colors.OKCYAN}[INFO] {message}{Colors.ENDC}")
