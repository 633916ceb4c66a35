#!/usr/bin/env python3
"""Run the voice bot in a detached tmux session.

    python bot_start.py start [--respawn]
    python bot_start.py stop | restart | status
"""

import argparse
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

DEFAULT_SESSION = "yt_voice_bot"
DEFAULT_LOG_FILE = "logs/yt_voice_bot.log"
CONSOLE_SCRIPT = "yt-voice-bot"


def default_cmd() -> str:
    """The installed console script, or the module run with this interpreter."""
    if shutil.which(CONSOLE_SCRIPT):
        return CONSOLE_SCRIPT
    return f"{shlex.quote(sys.executable)} -m yt_voice_bot.main"


def tmux(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(["tmux", *args], capture_output=True, text=True, check=False)


def is_running(session: str) -> bool:
    return tmux("has-session", "-t", session).returncode == 0


def build_inner_cmd(cmd: str, log_file: str, respawn: bool) -> str:
    """Shell line executed inside tmux: load .env, run, tee output to the log."""
    line = f"set -a; [ -f .env ] && . ./.env; set +a; {cmd} 2>&1 | tee -a {shlex.quote(log_file)}"
    if respawn:
        line = f'while true; do {line}; echo "[respawn] exited with $?"; sleep 2; done'
    return line


def start(session: str, cmd: str, log_file: str, respawn: bool) -> int:
    if is_running(session):
        print(f"[ok] '{session}' is already running (tmux attach -t {session})")
        return 0

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    workdir = str(Path(__file__).resolve().parent)
    res = tmux(
        "new-session", "-d", "-s", session, "-c", workdir,
        "bash", "-lc", build_inner_cmd(cmd, log_file, respawn),
    )
    if res.returncode != 0:
        print(f"[err] {res.stderr.strip() or 'could not create tmux session'}")
        return 1

    print(f"[ok] started '{session}', logging to {log_file}")
    return 0


def stop(session: str) -> int:
    if not is_running(session):
        print(f"[ok] '{session}' is not running")
        return 0
    res = tmux("kill-session", "-t", session)
    if res.returncode != 0:
        print(f"[err] {res.stderr.strip() or 'could not stop tmux session'}")
        return 1
    print(f"[ok] stopped '{session}'")
    return 0


def status(session: str) -> int:
    running = is_running(session)
    print(f"[status] '{session}': {'RUNNING' if running else 'NOT RUNNING'}")
    return 0 if running else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the voice bot in a tmux session.")
    parser.add_argument("--session", "-s", default=DEFAULT_SESSION)
    parser.add_argument("--cmd", "-c", default=None, help="command to run inside tmux")
    parser.add_argument("--log-file", "-l", default=DEFAULT_LOG_FILE)
    parser.add_argument("--respawn", action="store_true", help="restart the bot when it exits")
    parser.add_argument("action", choices=("start", "stop", "restart", "status"))
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if shutil.which("tmux") is None:
        print("[err] tmux is not installed")
        return 1

    session = args.session.strip().replace(" ", "_")
    cmd = (args.cmd or default_cmd()).strip()

    if args.action == "start":
        return start(session, cmd, args.log_file, args.respawn)
    if args.action == "stop":
        return stop(session)
    if args.action == "restart":
        stop(session)
        return start(session, cmd, args.log_file, args.respawn)
    return status(session)


if __name__ == "__main__":
    sys.exit(main())
