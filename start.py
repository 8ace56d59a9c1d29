#!/usr/bin/env python3
"""
CodeMend 启动脚本
Starts the context engine backend (API docs at /docs)
"""

import subprocess
import sys
import os
import socket


def _pick_free_port(host: str, preferred: int, max_tries: int = 30) -> int:
    preferred = int(preferred or 0)
    for port in range(max(preferred, 1), max(preferred, 1) + max_tries):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind((host, port))
                return port
        except OSError:
            continue
    return preferred or 0


def check_python():
    """Check if Python 3.10+ is available"""
    version = sys.version_info
    if version.major < 3 or (version.major == 3 and version.minor < 10):
        print("[ERROR] Python 3.10+ is required")
        return False
    print(f"[OK] Python {version.major}.{version.minor}.{version.micro}")
    return True


def main():
    print("=" * 50)
    print("  CodeMend - Context Preparation Engine")
    print("=" * 50)
    print()

    print("Checking requirements...")
    if not check_python():
        sys.exit(1)

    dev_mode = "--dev" in sys.argv[1:]
    host = os.environ.get("CODEMEND_HOST") or "127.0.0.1"
    preferred = int(os.environ.get("CODEMEND_PORT") or 8000)
    port = _pick_free_port(host, preferred) or preferred

    backend_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend")
    env = dict(os.environ)
    env["CODEMEND_HOST"] = host
    env["CODEMEND_PORT"] = str(port)
    if dev_mode:
        env["CODEMEND_DEBUG"] = "1"

    print()
    print(f"  Backend:    http://{host}:{port}")
    print(f"  API Docs:   http://{host}:{port}/docs")
    print(f"  Mode:       {'development (reload)' if dev_mode else 'production'}")
    print()

    try:
        subprocess.run([sys.executable, "-m", "codemend.main"], cwd=backend_dir, env=env, check=False)
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == '__main__':
    main()
