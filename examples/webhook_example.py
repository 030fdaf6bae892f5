"""
웹훅 동작 확인용 예제. 서버(python -m win_overlay)를 먼저 띄운 뒤 실행.

실행: python examples/webhook_example.py  (프로젝트 루트에서)
.env 의 WIN_TOKEN, OVERLAY_PORT 를 사용. TikFinity 에는 출력된 URL 을 그대로 등록하면 된다.
"""

import os
import sys
from pathlib import Path
from urllib.parse import quote

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx
from dotenv import load_dotenv

from win_overlay.overlay.webhook import APP_NAME

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def hook_url(base: str, token: str, action: str, arg: str = "") -> str:
    payload = f"{token}:{APP_NAME}:{action}" + (f":{arg}" if arg else "")
    return f"{base}/hook/{quote(payload, safe=':,')}"


def main():
    token = os.getenv("WIN_TOKEN", "changeme")
    base = f"http://127.0.0.1:{os.getenv('OVERLAY_PORT', '3000')}"

    steps = [
        ("set_max", "5"),
        ("set_current", "0"),
        ("win_plus", "2"),
        ("win_minus", ""),
        ("stroke", "4,#ff0000"),
        ("bg", "off"),
    ]
    with httpx.Client(timeout=5.0) as client:
        print("현재 상태:", client.get(f"{base}/api/config").json())
        for action, arg in steps:
            url = hook_url(base, token, action, arg)
            r = client.get(url)
            print(f"{action:<12} {r.status_code} {r.json()}")
        r = client.get(hook_url(base, "wrong-token", "win_plus"))
        print("잘못된 토큰:", r.status_code, r.json())


if __name__ == "__main__":
    main()
