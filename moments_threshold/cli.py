"""
moments-threshold: batch moment-preserving thresholding of an image folder.

Masks are paired with images by basename (``<stem>.npy`` preferred over
``<stem>.png``). Each output is written as ``<stem>_binary.png`` and the
per-image thresholds are collected in ``thresholds.json``.
"""

import argparse, json, logging, time
from pathlib import Path

import numpy as np
from tqdm import tqdm

from .classify import DEFAULT_INSIDE_VALUE, DEFAULT_OUTSIDE_VALUE, validate_output_values
from .core import process_image_file
from .errors import ThresholdError
from .histogram import DEFAULT_BINS
from .image_io import find_image_mask_pairs, save_image

METHOD_NAME = "moments_threshold"


def run_single_image(image_path: str, mask_path, args) -> dict:
    t0 = time.time()
    result = process_image_file(
        image_path,
        mask_path,
        bins=args.bins,
        inside_value=args.inside_value,
        outside_value=args.outside_value,
        mask_value=args.mask_value,
        mask_output=args.mask_output,
        intensity_range=args.intensity_range,
    )
    ms = (time.time() - t0) * 1000.0

    base = Path(image_path).stem
    out_path = Path(args.output_dir) / METHOD_NAME / f"{base}_binary.png"
    save_image(result.output, str(out_path))

    sol = result.solution
    logging.info(f"{base}, {'x'.join(map(str, result.output.shape))}, threshold {result.threshold}, "
                 f"p0 {sol.p0:.4f}, runtime_ms {ms:.2f}")
    return {
        "image": base,
        "mask": Path(mask_path).name if mask_path else None,
        "threshold": result.threshold,
        "p0": sol.p0,
        "mu0": sol.mu0,
        "mu1": sol.mu1,
        "t_bin": sol.t_bin,
        "runtime_ms": ms,
    }


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Moment-preserving (Tsai) thresholding, optionally masked")
    ap.add_argument("--images_dir", type=str, required=True)
    ap.add_argument("--masks_dir", type=str, default=None, help="masks restrict which pixels shape the threshold")
    ap.add_argument("--output_dir", type=str, required=True)
    ap.add_argument("--bins", type=int, default=DEFAULT_BINS)
    ap.add_argument("--inside-value", type=int, default=DEFAULT_INSIDE_VALUE, help="value for pixels below the threshold")
    ap.add_argument("--outside-value", type=int, default=DEFAULT_OUTSIDE_VALUE)
    ap.add_argument("--mask-value", type=int, default=None, help="mask label counted as inside, default any nonzero")
    ap.add_argument("--mask-output", action="store_true", help="set pixels outside the mask to the outside value")
    ap.add_argument("--intensity-range", type=str, default="native", choices=["native", "observed"])
    ap.add_argument("--num-images", type=int, default=0, help="0 means all")
    ap.add_argument("--start-one", type=int, default=1, help="1-indexed start position")
    ap.add_argument("--workers", type=int, default=0, help="threads over images")
    ap.add_argument("--log-level", type=str, default="INFO")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")

    if args.bins < 2:
        logging.error(f"--bins must be at least 2, got {args.bins}")
        return 2
    try:
        validate_output_values(args.inside_value, args.outside_value, np.uint8)
    except ThresholdError as e:
        logging.error(str(e))
        return 2

    pairs = find_image_mask_pairs(args.images_dir, args.masks_dir)
    start_idx = max(0, int(args.start_one) - 1)
    if start_idx >= len(pairs):
        logging.info(json.dumps({"processed": 0, "skipped": len(pairs), "reason": "start index beyond input"}))
        return 0
    end_idx = len(pairs) if args.num_images == 0 else min(len(pairs), start_idx + int(args.num_images))
    work_list = pairs[start_idx:end_idx]

    out_root = Path(args.output_dir) / METHOD_NAME
    out_root.mkdir(parents=True, exist_ok=True)

    processed, skipped = 0, 0
    rows = []

    def task(img_path, mask_path):
        base = Path(img_path).stem
        if args.masks_dir is not None and mask_path is None:
            return base, None, "missing mask"
        try:
            return base, run_single_image(img_path, mask_path, args), None
        except (ValueError, OSError) as e:
            return base, None, str(e)

    from concurrent.futures import ThreadPoolExecutor, as_completed
    with tqdm(total=len(work_list), desc="Moments") as pbar:
        if args.workers and args.workers > 0:
            with ThreadPoolExecutor(max_workers=int(args.workers)) as ex:
                futs = [ex.submit(task, i, m) for i, m in work_list]
                outcomes = []
                for f in as_completed(futs):
                    outcomes.append(f.result())
                    pbar.update(1)
        else:
            outcomes = []
            for img_path, mask_path in work_list:
                outcomes.append(task(img_path, mask_path))
                pbar.update(1)

    for base, row, err in sorted(outcomes, key=lambda o: o[0]):
        if row is None:
            logging.error(f"Error on {base}: {err}, skipping")
            skipped += 1
        else:
            rows.append(row)
            processed += 1

    with open(out_root / "thresholds.json", "w") as f:
        json.dump({"results": rows}, f, indent=2)

    times = [r["runtime_ms"] for r in rows]
    print(json.dumps({
        "total": len(work_list),
        "processed": processed,
        "skipped": skipped,
        "avg_runtime_ms": float(np.mean(times)) if times else None,
        "median_runtime_ms": float(np.median(times)) if times else None,
        "bins": int(args.bins),
        "masked": args.masks_dir is not None,
        "method": METHOD_NAME
    }))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
