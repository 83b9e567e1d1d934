from __future__ import annotations

import argparse
import base64
import io
import time

import requests
from PIL import Image, ImageDraw


def make_data_uri(index: int) -> str:
    img = Image.new('RGB', (256, 256), (240, 240, 240))
    draw = ImageDraw.Draw(img)
    draw.ellipse((40 + index % 20, 40, 220, 220), fill=(20, 120 + index % 100, 40))
    out = io.BytesIO()
    img.save(out, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(out.getvalue()).decode('ascii')


def wait_for_job(url: str, job_id: str, timeout: float) -> dict:
    deadline = time.time() + timeout
    while time.time() < deadline:
        resp = requests.get(f"{url}/api/jobs/{job_id}", timeout=10)
        resp.raise_for_status()
        status = resp.json()
        if status['status'] in {'finished', 'failed'}:
            return status
        time.sleep(0.5)
    raise TimeoutError(f"job {job_id} did not finish within {timeout}s")


def main() -> None:
    parser = argparse.ArgumentParser(description='Submit a thumbnail batch and time it end to end.')
    parser.add_argument('--url', default='http://127.0.0.1:8000')
    parser.add_argument('--images', type=int, default=20)
    parser.add_argument('--tolerance', type=int, default=10)
    parser.add_argument('--timeout', type=float, default=300.0)
    args = parser.parse_args()

    images = [make_data_uri(i) for i in range(args.images)]
    started = time.time()

    resp = requests.post(
        f"{args.url}/api/jobs/thumbnail-batch",
        json={'images': images, 'options': {'tolerance': args.tolerance}},
        timeout=30,
    )
    resp.raise_for_status()
    job_id = resp.json()['job_id']
    status = wait_for_job(args.url, job_id, args.timeout)

    elapsed = time.time() - started
    result = status.get('result') or {}
    print(
        {
            'job_id': job_id,
            'status': status['status'],
            'succeeded': result.get('succeeded'),
            'failed': len(result.get('failed') or []),
            'output_dir': result.get('output_dir'),
            'elapsed_sec': round(elapsed, 2),
            'images_per_sec': round(args.images / elapsed, 2),
        }
    )


if __name__ == '__main__':
    main()
