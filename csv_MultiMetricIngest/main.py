# csv_MultiMetricIngest/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from .core.errors import ParseError
from .core.pipeline import run_pipeline
from .utils.detect import discover_inputs, validate_csv_file

def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def main(argv: list[str] | None = None):
    # ---------- config ----------
    argv = sys.argv[1:] if argv is None else argv
    here = Path(__file__).resolve().parent
    cfg_path = Path(argv[0]) if argv else here / "config.yaml"
    cfg = load_config(cfg_path)

    in_path = Path(cfg["input"]["path"]).resolve()
    recurse = bool(cfg["input"].get("recurse", True))
    out_root = Path(cfg["output"]["root"]).resolve()
    out_root.mkdir(parents=True, exist_ok=True)

    log_cfg = cfg.get("logging", {}) or {}
    verbose = bool(log_cfg.get("verbose", True))
    logging.basicConfig(level=str(log_cfg.get("level", "WARNING")).upper(),
                        format="%(levelname)s %(name)s: %(message)s")
    if verbose:
        print(f"[cfg] input={in_path} (recurse={recurse})")
        print(f"[cfg] output={out_root}")

    # ---------- discover ----------
    detected = discover_inputs(in_path, recurse=recurse)
    if not detected:
        print(f"[INFO] No CSV inputs found under: {in_path}")
        sys.exit(0)
    if verbose:
        print(f"[detector] found {len(detected)} CSV input(s)")

    max_bytes = int(cfg["input"].get("max_bytes", 10 * 1024 * 1024))
    done = 0
    for item in detected:
        ok, reason = validate_csv_file(item.path, max_bytes=max_bytes)
        if not ok:
            print(f"[skip] {item.path.name}: {reason}")
            continue
        if verbose:
            print(f"  [load] {item.path.name} ({item.size} bytes)")
        try:
            run_pipeline(item.path, cfg, out_root)
            done += 1
        except ParseError as e:
            print(f"[WARN] {item.path.name}: {e}")
        except UnicodeDecodeError as e:
            print(f"[WARN] {item.path.name}: not UTF-8 text ({e.reason})")

    if verbose:
        print(f"[summary] processed {done} of {len(detected)} file(s)")

if __name__ == "__main__":
    main()
