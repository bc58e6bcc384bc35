from __future__ import annotations
import argparse
import json
import sys
import time
from typing import Any, Dict, List

import requests

import config
from colors import hex_to_luminance, is_hex_color
from engine import REFLEX_SPEED

DEFAULT_BASE_URL = config.BASE_URL

# -----------------------------
# Simple HTTP client helpers
# -----------------------------
def _post(base_url: str, path: str, payload: Dict[str, Any] | None = None) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}{path}"
    r = requests.post(url, json=payload or {}, timeout=60)
    if r.status_code >= 400:
        print(f"\n[CLIENT] HTTP {r.status_code} from {url}")
        try:
            print("[CLIENT] Body:", r.json())
        except ValueError:
            print("[CLIENT] Body:", r.text[:1000])
        r.raise_for_status()
    return r.json()

def _get(base_url: str, path: str) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}{path}"
    r = requests.get(url, timeout=60)
    r.raise_for_status()
    return r.json()

# -----------------------------
# API wrappers
# -----------------------------
def start_session(base_url: str, game: str) -> Dict[str, Any]:
    return _post(base_url, "/v1/games/sessions", {"game": game})

def get_state(base_url: str, session_id: str) -> Dict[str, Any]:
    return _get(base_url, f"/v1/games/sessions/{session_id}")

def end_session(base_url: str, session_id: str) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}/v1/games/sessions/{session_id}"
    r = requests.delete(url, timeout=60)
    r.raise_for_status()
    return r.json()

def submit_order(base_url: str, session_id: str, ids: List[str]) -> Dict[str, Any]:
    return _post(base_url, f"/v1/games/sessions/{session_id}/order", {"ids": ids})

def tick(base_url: str, session_id: str, delta_ms: float) -> Dict[str, Any]:
    return _post(base_url, f"/v1/games/sessions/{session_id}/tick", {"delta_ms": delta_ms})

def stop(base_url: str, session_id: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/games/sessions/{session_id}/stop")

def answer(base_url: str, session_id: str, same: bool) -> Dict[str, Any]:
    return _post(base_url, f"/v1/games/sessions/{session_id}/answer", {"same": same})

def new_round(base_url: str, session_id: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/games/sessions/{session_id}/rounds")

# -----------------------------
# Pretty printers
# -----------------------------
def print_swatches(state: Dict[str, Any]) -> None:
    print(f"\n===== Color Sort · Round {state['round_index']} =====")
    for i, s in enumerate(state["swatches"], start=1):
        print(f"  {i}. {s['hex'].upper()}")

def print_state(state: Dict[str, Any]) -> None:
    print("\n===== SESSION STATE =====")
    print(json.dumps(state, indent=2))
    print("=" * 25)

# -----------------------------
# Interactive play loops
# -----------------------------
def play_ordering(base_url: str, rounds: int) -> None:
    st = start_session(base_url, "ordering")
    sid = st["session_id"]
    for _ in range(rounds):
        print_swatches(st)
        raw = input("Order darkest → lightest (e.g. 3 1 5 2 4): ").split()
        picked = [st["swatches"][int(n) - 1]["id"] for n in raw]
        res = submit_order(base_url, sid, picked)
        print(res["message"])
        st = new_round(base_url, sid)
    print_state(end_session(base_url, sid))

def play_reflex(base_url: str, rounds: int) -> None:
    st = start_session(base_url, "reflex")
    sid = st["session_id"]
    for _ in range(rounds):
        print(f"\nTarget: {st['target_start']:.0f}–{st['target_end']:.0f}% · marker moves {REFLEX_SPEED * 1000:.0f}%/s")
        input("Press Enter to start the marker...")
        t0 = time.monotonic()
        input("Press Enter to STOP!")
        tick(base_url, sid, (time.monotonic() - t0) * 1000.0)
        res = stop(base_url, sid)
        print(f"Stopped at {res['position']:.1f}% → {res['gained']:+d} (score {res['score']})")
        st = new_round(base_url, sid)
    print_state(end_session(base_url, sid))

def play_similarity(base_url: str) -> None:
    st = start_session(base_url, "similarity")
    sid = st["session_id"]
    last = time.monotonic()
    while st["phase"] != "ended":
        print(f"\nTime: {st['time_left']}s · Score: {st['score']}")
        print(f"  left  {st['left'].upper()}\n  right {st['right'].upper()}")
        said = input("Same color? [y/n]: ").strip().lower().startswith("y")
        now = time.monotonic()
        st = tick(base_url, sid, (now - last) * 1000.0)
        last = now
        if st["phase"] == "ended":
            break
        res = answer(base_url, sid, said)
        print("Correct!" if res["correct"] else "Nope.")
        st = get_state(base_url, sid)
    print(f"\nTime up! Final Score: {st['score']}")
    print_state(end_session(base_url, sid))

# -----------------------------
# Auto-demo play loop
# -----------------------------
def auto_demo_play(base_url: str, game: str, rounds: int) -> None:
    """
    Plays perfectly for quick verification of a running server.
    """
    print(f"\n🤖 Running {game} auto-demo...")
    st = start_session(base_url, game)
    sid = st["session_id"]
    print(f"✅ Session started: {sid}")

    if game == "ordering":
        for _ in range(rounds):
            ids = [s["id"] for s in sorted(st["swatches"], key=lambda s: hex_to_luminance(s["hex"]))]
            res = submit_order(base_url, sid, ids)
            print(f"Round {st['round_index']}: {res['message']}")
            st = new_round(base_url, sid)
    elif game == "reflex":
        for _ in range(rounds):
            mid = (st["target_start"] + st["target_end"]) / 2.0
            tick(base_url, sid, mid / REFLEX_SPEED)
            res = stop(base_url, sid)
            print(f"Round {st['round_index']}: stop at {res['position']:.1f} → {res['gained']:+d}")
            st = new_round(base_url, sid)
    else:
        while st["phase"] != "ended":
            answer(base_url, sid, st["left"] == st["right"])
            st = tick(base_url, sid, 1000.0)
        print(f"Time up! Final Score: {st['score']}")

    print_state(end_session(base_url, sid))

# -----------------------------
# Run server (programmatically)
# -----------------------------
def run_server(port: int, host: str = "127.0.0.1", reload: bool = True) -> None:
    import uvicorn
    uvicorn.run("api:app", host=host, port=port, reload=reload)

# -----------------------------
# Health checker
# -----------------------------
def health_check(base_url: str) -> None:
    print(f"🔎 Checking server at {base_url} ...")
    try:
        r = requests.get(f"{base_url.rstrip('/')}/docs", timeout=10)
        r.raise_for_status()
        print("✅ /docs reachable")

        st = start_session(base_url, "ordering")
        end_session(base_url, st["session_id"])
        print(f"✅ JSON API ok (session_id={st['session_id']})")
    except requests.RequestException as e:
        print(f"❌ Health check failed: {e}")
        sys.exit(1)

# -----------------------------
# CLI
# -----------------------------
def hex_color(text: str) -> str:
    if not is_hex_color(text):
        raise argparse.ArgumentTypeError(f"not a #rrggbb color: {text!r}")
    return "#" + text.lstrip("#").lower()

def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Color games: server + client in one file")

    sub = p.add_subparsers(dest="cmd", required=True)

    ps = sub.add_parser("serve", help="Start the FastAPI server (uvicorn)")
    ps.add_argument("--port", type=int, default=config.PORT, help="Port to bind")
    ps.add_argument("--host", type=str, default=config.HOST, help="Host to bind")
    ps.add_argument("--no-reload", action="store_true", help="Disable auto-reload")

    pp = sub.add_parser("play", help="Play a game (interactive or auto)")
    pp.add_argument("--game", choices=["ordering", "reflex", "similarity"], required=True)
    pp.add_argument("--rounds", type=int, default=3, help="Rounds for ordering/reflex")
    pp.add_argument("--base-url", type=str, default=DEFAULT_BASE_URL, help="API base URL")
    pp.add_argument("--auto-demo", action="store_true", help="Play perfectly instead of prompting")

    ph = sub.add_parser("health", help="Check server availability")
    ph.add_argument("--base-url", type=str, default=DEFAULT_BASE_URL, help="API base URL")

    pl = sub.add_parser("luminance", help="Print the relative luminance of a hex color")
    pl.add_argument("hex", type=hex_color, help="Color as #rrggbb")

    return p.parse_args(argv)

def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)

    if args.cmd == "serve":
        run_server(port=args.port, host=args.host, reload=(not args.no_reload))
        return

    if args.cmd == "play":
        try:
            requests.get(f"{args.base_url.rstrip('/')}/docs", timeout=5).raise_for_status()
        except requests.RequestException:
            print("⚠️  Could not reach the server. Is it running?\n"
                  "    Start it in another terminal:\n"
                  "    python main.py serve")
            sys.exit(1)

        if args.auto_demo:
            auto_demo_play(args.base_url, args.game, args.rounds)
        elif args.game == "ordering":
            play_ordering(args.base_url, args.rounds)
        elif args.game == "reflex":
            play_reflex(args.base_url, args.rounds)
        else:
            play_similarity(args.base_url)
        return

    if args.cmd == "health":
        health_check(args.base_url)
        return

    if args.cmd == "luminance":
        print(f"{hex_to_luminance(args.hex):.4f}")
        return

    print("Unknown command. Try: python main.py --help")
    sys.exit(2)

if __name__ == "__main__":
    main()
