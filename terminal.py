from blessed import Terminal
term = Terminal()

banner = "🅱️  AI Codegen\n" + "=" * 50
banner_lines = len(banner.split('\n'))

def clear_screen():
    print(term.home + term.clear)

def clear_screen_preserve_banner(banner_lines):
    print(term.move(banner_lines, 0) + term.clear_eos())
