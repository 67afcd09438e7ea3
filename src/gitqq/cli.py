#!/usr/bin/env python3
"""
gitqq - GitHub account switcher CLI

Main entry point that provides a menu-driven interface or direct CLI commands
for switching identities and pushing under them.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from gitqq import __version__
from gitqq import accounts, repo
from gitqq.config import Store, get_active, load_store
from gitqq.errors import GitqqError, UserCancelled
from gitqq.inspector import compare_with_upstream, get_current_branch, inspect_repository
from gitqq.log import setup_logging
from gitqq.push import PushStrategy, classify, handle_push
from gitqq.ui import Colors, choose

logger = logging.getLogger(__name__)


def show_menu(store: Store, repo_path: Path):
    """Account menu: pick an identity to work as, or manage identities."""
    options = []
    for handle in store.identities:
        marker = " ✓" if handle == store.active_handle else "  "
        options.append((f"{marker} {handle}", ("select", handle)))
    if options:
        options.append((None, None))
    options.extend([
        ("➕ Add Account", ("add", None)),
        ("🗑️  Remove Account", ("remove", None)),
        ("❌ Exit", ("exit", None)),
    ])

    try:
        action, handle = choose("Choose account or manage accounts:", options)
    except UserCancelled:
        action, handle = "exit", None

    if action == "exit":
        print(f"{Colors.BLUE}👋 Goodbye!{Colors.RESET}")
        sys.exit(0)

    if action == "select":
        if accounts.select_account(store, handle):
            print()
            repo.main_with_repo(store, repo_path)
    elif action == "add":
        accounts.add_account_interactive(store)
    elif action == "remove":
        accounts.remove_account_interactive(store)
    print()


def run_menu(store: Store, repo_path: Path):
    print(f"{Colors.BLUE}{Colors.BOLD}\n🚀 gitqq - GitHub Account Manager\n{Colors.RESET}")
    while True:
        try:
            show_menu(store, repo_path)
        except UserCancelled:
            # Ctrl+C inside a submenu backs out to the account menu;
            # at the account menu itself show_menu exits.
            print(f"\n{Colors.YELLOW}Cancelled{Colors.RESET}")
        except GitqqError as e:
            logger.error("Operation failed: %s", e)
            print(f"{Colors.RED}❌ {e}{Colors.RESET}")


def show_status(store: Store, repo_path: Path):
    active = store.active_handle or "(none)"
    print(f"Account:  {Colors.GREEN}{active}{Colors.RESET}")
    identity = get_active(store)
    status = inspect_repository(repo_path, identity)
    if not status.is_repository:
        print(f"{Colors.YELLOW}Not a git repository: {repo_path}{Colors.RESET}")
        return 1

    print(f"Remote:   {status.remote_url or '(none)'}"
          + (f"  {Colors.YELLOW}(https - convert to SSH for per-account keys){Colors.RESET}"
             if status.uses_insecure_transport else ""))

    branch = get_current_branch(repo_path, identity)
    print(f"Branch:   {branch or '(detached)'}")
    if branch and status.has_remote:
        comparison = compare_with_upstream(repo_path, branch, identity)
        if comparison is None:
            print("Upstream: (none - first push will set it)")
        else:
            print(f"Upstream: {comparison.upstream}  "
                  f"{classify(comparison).value} (ahead {comparison.ahead_count}, "
                  f"behind {comparison.behind_count})")
    return 0


def main(argv: Optional[list] = None):
    """Main entry point for gitqq CLI."""
    parser = argparse.ArgumentParser(
        description="gitqq - switch between GitHub accounts and push safely",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gitqq                            # Interactive menu in current directory
  gitqq list                       # Show configured accounts
  gitqq use work                   # Activate the 'work' account
  gitqq add alice --email a@x.io --method file --key id_ed25519
  gitqq status                     # Account, remote and ahead/behind
  gitqq push --strategy fetch-then-force
  gitqq run log --oneline -5       # Any git command as the active account
  gitqq -C ~/myproject push        # Operate on another directory
        """
    )

    parser.add_argument('-C', '--repo', type=str, default=None,
                        help='Working directory (default: current directory)')
    parser.add_argument('--config', type=str, default=None,
                        help='Config file (default: ~/.gitqq-config.json or $GITQQ_CONFIG)')
    parser.add_argument('-v', '--version', action='version', version=f'gitqq {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('list', help='List configured accounts')

    use_parser = subparsers.add_parser('use', help='Activate an account')
    use_parser.add_argument('handle', help='Account handle')

    add_parser = subparsers.add_parser('add', help='Add an account without prompts')
    add_parser.add_argument('handle', help='GitHub username / account handle')
    add_parser.add_argument('--email', required=True, help='Commit email')
    add_parser.add_argument('--name', default=None, help='Commit author name (default: handle)')
    add_parser.add_argument('--method', choices=accounts.KEY_METHODS, default='generate',
                            help='generate a key, or use an existing key file (default: generate)')
    add_parser.add_argument('--key', default=None,
                            help='Existing key file name in ~/.ssh (for --method file)')

    remove_parser = subparsers.add_parser('remove', help='Remove an account')
    remove_parser.add_argument('handle', help='Account handle')
    remove_parser.add_argument('--delete-key', action='store_true',
                               help='Also delete the key pair gitqq generated for it')

    subparsers.add_parser('status', help='Show account, remote and ahead/behind state')

    push_parser = subparsers.add_parser('push', help='Push the current branch as the active account')
    push_parser.add_argument('--strategy', choices=[s.value for s in PushStrategy], default=None,
                             help='Skip the strategy menu')

    run_parser = subparsers.add_parser('run', help='Run a git command as the active account')
    run_parser.add_argument('git_args', nargs=argparse.REMAINDER, help='git arguments')

    args = parser.parse_args(argv)

    setup_logging()

    repo_path = Path(args.repo).expanduser().resolve() if args.repo else Path.cwd()
    store = load_store(Path(args.config).expanduser() if args.config else None)

    try:
        if args.command == 'list':
            accounts.show_accounts(store)

        elif args.command == 'use':
            if args.handle not in store.identities:
                print(f"{Colors.RED}❌ No account named '{args.handle}'{Colors.RESET}", file=sys.stderr)
                sys.exit(1)
            if not accounts.select_account(store, args.handle):
                sys.exit(1)

        elif args.command == 'add':
            if args.method == 'paste':
                print(f"{Colors.RED}❌ --method paste needs the interactive menu{Colors.RESET}", file=sys.stderr)
                sys.exit(2)
            accounts.create_account(store, args.handle, args.email, name=args.name,
                                    key_method=args.method, key_name=args.key)
            print(f"{Colors.GREEN}✅ Added and activated account: {args.handle}{Colors.RESET}")

        elif args.command == 'remove':
            accounts.remove_account(store, args.handle, delete_key=args.delete_key)
            print(f"{Colors.GREEN}✅ Removed account: {args.handle}{Colors.RESET}")

        elif args.command == 'status':
            sys.exit(show_status(store, repo_path))

        elif args.command == 'push':
            strategy = PushStrategy(args.strategy) if args.strategy else None
            if not handle_push(store, get_active(store), repo_path, strategy=strategy):
                sys.exit(1)

        elif args.command == 'run':
            if not args.git_args:
                run_parser.error("a git command is required")
            result = repo.execute_custom_command(get_active(store), repo_path,
                                                 command=args.git_args)
            if result is None or not result.ok:
                sys.exit(1)

        else:
            run_menu(store, repo_path)

    except UserCancelled:
        print(f"\n{Colors.YELLOW}Cancelled{Colors.RESET}")
        sys.exit(130)
    except GitqqError as e:
        logger.error("%s failed: %s", args.command or "menu", e)
        print(f"{Colors.RED}❌ {e}{Colors.RESET}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
