"""
Menu formatting utilities for the aftermarket CLI interface.
Provides consistent styling, colors, and layout for interactive menus.
"""


# ANSI color codes for menu styling
class Colors:
    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


class MenuFormatter:
    """Menu formatting class with consistent styling"""

    def __init__(self, width: int = 80):
        self.width = width

    def print_header(self, title: str, subtitle: str = None):
        """Print a header box with the application title"""
        print("\n" + Colors.HEADER + "╔" + "═" * (self.width - 2) + "╗" + Colors.ENDC)
        print(
            Colors.HEADER
            + "║"
            + Colors.BOLD
            + f"{title:^{self.width-2}}"
            + Colors.ENDC
            + Colors.HEADER
            + "║"
            + Colors.ENDC
        )
        if subtitle:
            print(
                Colors.HEADER
                + "║"
                + Colors.OKBLUE
                + f"{subtitle:^{self.width-2}}"
                + Colors.ENDC
                + Colors.HEADER
                + "║"
                + Colors.ENDC
            )
        print(Colors.HEADER + "╚" + "═" * (self.width - 2) + "╝" + Colors.ENDC)

    def print_status_bar(self, network: str, address: str = None):
        """Print a status information bar"""
        status_line = f"Network: {network}"
        if address:
            status_line += f" | Wallet: {address[:20]}...{address[-8:]}"

        print(f"{Colors.OKBLUE}┌{Colors.ENDC}" + "─" * (self.width - 2) + f"{Colors.OKBLUE}┐{Colors.ENDC}")
        print(f"{Colors.OKBLUE}│{Colors.ENDC} {status_line:<{self.width-4}} {Colors.OKBLUE}│{Colors.ENDC}")
        print(f"{Colors.OKBLUE}└{Colors.ENDC}" + "─" * (self.width - 2) + f"{Colors.OKBLUE}┘{Colors.ENDC}")

    def print_section(self, title: str):
        """Print a section separator"""
        print(
            f"\n{Colors.OKBLUE}┌─ {Colors.BOLD}{title}{Colors.ENDC} {Colors.OKBLUE}{'─' * (self.width - len(title) - 4)}{Colors.ENDC}"
        )

    def print_menu_option(self, number: str, description: str):
        """Print a formatted menu option"""
        print(f"{Colors.OKBLUE}│{Colors.ENDC} {Colors.BOLD}{number:>2}{Colors.ENDC}. {description}")

    def print_field(self, label: str, value: str):
        """Print a labelled value inside a section"""
        print(f"{Colors.OKBLUE}│{Colors.ENDC}   {label:<18} {value}")

    def print_separator(self):
        print(f"{Colors.OKBLUE}├{Colors.ENDC}" + "─" * (self.width - 2))

    def print_footer(self):
        print(f"{Colors.OKBLUE}└{Colors.ENDC}" + "─" * (self.width - 2))

    def print_success(self, message: str):
        print(f"\n{Colors.OKGREEN}✓ {message}{Colors.ENDC}")

    def print_error(self, message: str):
        print(f"\n{Colors.FAIL}✗ Error: {message}{Colors.ENDC}")

    def print_info(self, message: str):
        print(f"\n{Colors.OKBLUE}ℹ {message}{Colors.ENDC}")

    def get_input(self, prompt: str) -> str:
        """Get user input with formatted prompt"""
        return input(f"{Colors.BOLD}> {prompt}: {Colors.ENDC}").strip()

    def confirm_action(self, message: str) -> bool:
        """Ask for user confirmation with formatted prompt"""
        response = input(f"{Colors.WARNING}? {message} (y/N): {Colors.ENDC}").strip().lower()
        return response in ["y", "yes"]
