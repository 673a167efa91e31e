"""Exercise a running classify-gateway from the command line.

    python -m classify_gateway.smoke single cat.png
    python -m classify_gateway.smoke multipart cat.png
    python -m classify_gateway.smoke flood cat.png -c 8 -n 32
"""
import argparse
import asyncio
import base64
import io
import pathlib
import statistics
import sys
import time
from typing import Optional

import httpx
from PIL import Image

SERVICE_URL = "http://localhost:8000"
HEALTH_PATH = "/health"
CLASSIFY_PATH = "/classify"


def create_test_image(color: tuple = (255, 255, 255), size: tuple = (28, 28)) -> bytes:
    """Create a test image for when you don't have real images."""
    img = Image.new("RGB", size, color=color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _image_bytes(img: Optional[pathlib.Path]) -> tuple[str, bytes]:
    if img and img.exists():
        return img.name, img.read_bytes()
    return "generated.png", create_test_image()


async def check_health(url: str):
    async with httpx.AsyncClient() as cli:
        r = await cli.get(url + HEALTH_PATH, timeout=5)
    print("health:", r.status_code, r.json())


# ────────────────────────────────────────────────────────────
#  SINGLE IMAGE (base64 JSON)
# ────────────────────────────────────────────────────────────
async def run_single(url: str, img: Optional[pathlib.Path], verbose: bool = True):
    name, data = _image_bytes(img)
    payload = {"image": base64.b64encode(data).decode()}
    async with httpx.AsyncClient() as cli:
        t0 = time.perf_counter()
        r = await cli.post(url + CLASSIFY_PATH, json=payload, timeout=120)
        dt = (time.perf_counter() - t0) * 1000

    mark = "✓" if r.status_code == 200 else "✗"
    print(f"{mark} {name}: {r.status_code} ({dt:.1f} ms)")
    if verbose and r.text:
        print(f"  {r.text}")
    return r.status_code, dt


# ────────────────────────────────────────────────────────────
#  SINGLE IMAGE (multipart upload)
# ────────────────────────────────────────────────────────────
async def run_multipart(url: str, img: Optional[pathlib.Path]):
    name, data = _image_bytes(img)
    async with httpx.AsyncClient() as cli:
        t0 = time.perf_counter()
        r = await cli.post(
            url + CLASSIFY_PATH,
            files={"image": (name, data, "application/octet-stream")},
            timeout=120,
        )
        dt = (time.perf_counter() - t0) * 1000

    mark = "✓" if r.status_code == 200 else "✗"
    print(f"{mark} {name}: {r.status_code} ({dt:.1f} ms)")
    if r.text:
        print(f"  {r.text}")


# ────────────────────────────────────────────────────────────
#  FLOOD / CONCURRENCY BENCH
# ────────────────────────────────────────────────────────────
async def run_many(url: str, img: Optional[pathlib.Path], conc: int, repeat: int):
    _, data = _image_bytes(img)
    payload = {"image": base64.b64encode(data).decode()}  # encode once

    print(f"\nFlood test: {repeat} requests with max {conc} concurrent")
    latencies, codes = [], []
    sem = asyncio.Semaphore(conc)

    async with httpx.AsyncClient() as cli:
        async def bound():
            async with sem:
                t0 = time.perf_counter()
                r = await cli.post(url + CLASSIFY_PATH, json=payload, timeout=120)
                latencies.append((time.perf_counter() - t0) * 1000)
                codes.append(r.status_code)

        await asyncio.gather(*(bound() for _ in range(repeat)))

    ok = codes.count(200)
    print(f"\n{'='*60}")
    print(f"  Success rate: {ok}/{repeat} ({ok/repeat*100:.1f}%)")
    if latencies:
        print(f"  p50: {statistics.median(latencies):.1f} ms")
        if len(latencies) >= 20:
            print(f"  p95: {statistics.quantiles(latencies, n=20)[18]:.1f} ms")
        print(f"  max: {max(latencies):.1f} ms")
    print('='*60)


def main():
    p = argparse.ArgumentParser(description="Smoke-test a classify-gateway instance")
    p.add_argument("--url", default=SERVICE_URL, help="Base URL of the service")
    sub = p.add_subparsers(dest="cmd", required=True, help="Command to run")

    sub.add_parser("health", help="Check service health")

    s1 = sub.add_parser("single", help="POST one image as base64 JSON")
    s1.add_argument("image", type=pathlib.Path, nargs="?", help="Image file path")

    s2 = sub.add_parser("multipart", help="POST one image as a multipart upload")
    s2.add_argument("image", type=pathlib.Path, nargs="?", help="Image file path")

    s3 = sub.add_parser("flood", help="Load/concurrency test")
    s3.add_argument("image", type=pathlib.Path, nargs="?", help="Image to use for testing")
    s3.add_argument("-c", "--concurrency", type=int, default=8, help="Max concurrent requests")
    s3.add_argument("-n", "--repeat", type=int, default=32, help="Total requests to send")

    args = p.parse_args()
    url = args.url.rstrip("/")

    if args.cmd == "health":
        asyncio.run(check_health(url))
    elif args.cmd == "single":
        asyncio.run(run_single(url, args.image))
    elif args.cmd == "multipart":
        asyncio.run(run_multipart(url, args.image))
    elif args.cmd == "flood":
        asyncio.run(run_many(url, args.image, args.concurrency, args.repeat))


if __name__ == "__main__":
    main()
