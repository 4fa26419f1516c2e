#!/usr/bin/env python3
"""
run_ncd.py – pairwise compression distances for files or waveform windows
-------------------------------------------------------------------------

* items = files (--files, globs allowed) or windows of a .npy waveform (--npy)
* NCD matrix, symmetric (threaded) or --asym (both concatenation orders)
* prints matrix stats, nearest neighbours and a cluster silhouette
* writes reports/ncd_matrix.csv + heatmap, dendrogram & MDS PNGs

❱  Example
python scripts/run_ncd.py --files "corpus/*.txt" --codec bzip2 --level best_compression
python scripts/run_ncd.py --npy data/storm5_wave.npy --chunk 2048 --overlap 0.5 --clusters 3
"""

import argparse, logging, numpy as np, matplotlib.pyplot as plt, seaborn as sns
from pathlib import Path
from tqdm import tqdm
from scipy.cluster.hierarchy import dendrogram

from ncd_ml.analysis          import cluster, embed, flat_clusters, nearest, silhouette, to_frame
from ncd_ml.config            import NCDConfig
from ncd_ml.datamodules_npy   import WindowItems, collect_files
from ncd_ml.logging_config    import configure_logging
from ncd_ml.models.ncd        import NCDEngine

# ── CLI ───────────────────────────────────────────────────────────────────────
pa = argparse.ArgumentParser(formatter_class=argparse.ArgumentDefaultsHelpFormatter)
src = pa.add_mutually_exclusive_group(required=True)
src.add_argument("--files",   nargs="+", help="files or glob patterns")
src.add_argument("--npy",     help="1-D waveform .npy, sliced into windows")
pa.add_argument("--chunk",    type=int,   default=2048, help="window length (samples)")
pa.add_argument("--overlap",  type=float, default=0.0,  help="window overlap fraction")
pa.add_argument("--codec",    choices=["gzip","bzip2"], default=None)
pa.add_argument("--level",    choices=["default","best_speed","best_compression"], default=None)
pa.add_argument("--workers",  type=int,   default=None, help="threads (default: NCD_WORKERS or all cores)")
pa.add_argument("--asym",     action="store_true", help="dense matrix with both concatenation orders")
pa.add_argument("--clusters", type=int,   default=2,    help="flat clusters for the silhouette score")
pa.add_argument("--out",      default="reports")
pa.add_argument("--dpi",      type=int,   default=160)
pa.add_argument("--log_level",default=None)
args = pa.parse_args()

configure_logging(args.log_level)
log = logging.getLogger("ncd_ml.run_ncd")
out = Path(args.out); out.mkdir(parents=True, exist_ok=True)

cfg = NCDConfig.from_env(algorithm=args.codec, level=args.level, workers=args.workers,
                         is_file=bool(args.files))
eng = NCDEngine.from_config(cfg)

# ── items ─────────────────────────────────────────────────────────────────────
if args.files:
    paths  = collect_files(args.files)
    items  = paths
    labels = [p.name for p in paths]
else:
    wins   = WindowItems(args.npy, args.chunk, args.overlap)
    items  = wins.items()
    labels = wins.labels()
n = len(items)
log.info("%d items   %s", n, eng)

# ── NCD ───────────────────────────────────────────────────────────────────────
with tqdm(total=n*(n-1)//2, unit="pair") as bar:
    def tick(done, total):
        bar.update(done - bar.n)
    if args.asym:
        D = eng.unsymmetric(items, is_file=cfg.is_file, progress=tick)
    else:
        D = eng.symmetric(items, is_file=cfg.is_file, progress=tick)
dense = np.asarray(D)
off   = dense[~np.eye(n, dtype=bool)]
if n > 1:
    print(f"• NCD finished   mean={off.mean():.4f}  med={np.median(off):.4f}  "
          f"min={off.min():.4f}  max={off.max():.4f}")

frame = to_frame(dense, labels)
frame.to_csv(out / "ncd_matrix.csv", float_format="%.6f")

# ── neighbours & clusters -----------------------------------------------------
if n > 2:
    nn = nearest(dense, k=1)[:, 0]
    for i in range(min(n, 20)):
        print(f"  {labels[i]:<30} → {labels[nn[i]]:<30} {dense[i, nn[i]]:.4f}")
    k = min(max(2, args.clusters), n - 1)
    lab = flat_clusters(D, k)
    if len(set(lab)) > 1:
        print(f"• {len(set(lab))} clusters   silhouette={silhouette(D, lab):.3f}")

# ── plots ---------------------------------------------------------------------
sns.set_style("darkgrid"); dpi=args.dpi; side=max(6, min(20, 0.3*n))

plt.figure(figsize=(side, side*0.85), dpi=dpi)
sns.heatmap(frame, vmin=0, vmax=1, cmap="viridis", square=True,
            xticklabels=n <= 60, yticklabels=n <= 60)
plt.title(f"NCD ({eng.algorithm.value}, {eng.level.value})"); plt.tight_layout()
plt.savefig(out / "ncd_heatmap.png", dpi=dpi)

if n > 1:
    plt.figure(figsize=(max(8, side), 4), dpi=dpi)
    dendrogram(cluster(D), labels=labels, no_labels=n > 60, leaf_rotation=90)
    plt.title("average-linkage dendrogram"); plt.ylabel("NCD"); plt.tight_layout()
    plt.savefig(out / "ncd_dendrogram.png", dpi=dpi)

if n > 2:
    xy = embed(D)
    plt.figure(figsize=(7, 6), dpi=dpi)
    plt.scatter(xy[:, 0], xy[:, 1], s=18, c=lab, cmap="tab10")
    if n <= 60:
        for (x, y), name in zip(xy, labels):
            plt.annotate(name, (x, y), fontsize=7, alpha=.8)
    plt.title("MDS of NCD (colour = cluster)"); plt.tight_layout()
    plt.savefig(out / "ncd_mds.png", dpi=dpi)

print(f"✓ written → {out/'ncd_matrix.csv'} / ncd_heatmap.png / ncd_dendrogram.png / ncd_mds.png")
