"""Point d'entrée CLI : exécution d'une campagne et export des résultats."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

from .batch import run_batch
from .config import DEFAULT_SCENARIOS, load_scenario, with_overrides
from .download import BANDWIDTH_WEIGHTINGS
from .plotting import plot_batch
from .reporter import FrameReporter, LoggingReporter, MultiReporter
from .seeds import spawn_rng
from .utils import ensure_output_dirs, save_csv, save_json

LOGGER_NAME = "mobidlsim.batch_run"


class _BatchContextFilter(logging.Filter):
    """Injecte des champs de contexte par défaut pour le formatage des logs."""

    def __init__(self, scenario: str = "-", seed: object = "-") -> None:
        super().__init__()
        self.defaults = {"scenario": scenario, "seed": seed if seed is not None else "-"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.defaults.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def configure_logging(
    *,
    scenario: str,
    seed: Optional[int],
    quiet: bool = False,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
) -> tuple[logging.Logger, Optional[Path]]:
    """Configure le logger de campagne : console INFO (+ fichier DEBUG)."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="%(asctime)s | scenario=%(scenario)s | seed=%(seed)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    context_filter = _BatchContextFilter(scenario, seed)

    console_handler = logging.StreamHandler()
    if quiet:
        console_handler.setLevel(logging.WARNING)
    else:
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    log_path: Optional[Path] = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"batch_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

    return logger, log_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simule des téléchargements sur un lien intermittent WiFi + 4G/5G."
    )
    parser.add_argument(
        "--scenario",
        default="dual_radio_pareto",
        help="Identifiant du scénario (clé dans le YAML, défaut: %(default)s).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_SCENARIOS,
        help="Fichier YAML décrivant les scénarios (défaut: %(default)s).",
    )
    parser.add_argument("--iterations", type=int, default=None, help="Nombre de runs.")
    parser.add_argument("--seed", type=int, default=None, help="Graine déterministe.")
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Seuil de débit moyen (Mbps) pour marquer un run.",
    )
    parser.add_argument(
        "--weighting",
        choices=BANDWIDTH_WEIGHTINGS,
        default=None,
        help="Moyenne du débit par intervalle ou pondérée par la durée.",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Répertoire de sortie (runs.csv, summary.json, figures).",
    )
    parser.add_argument("--steps", action="store_true", help="Exporte aussi steps.csv.")
    parser.add_argument("--plot", action="store_true", help="Produit la figure récapitulative.")
    parser.add_argument("--log-steps", action="store_true", help="Journalise chaque intervalle (DEBUG).")
    parser.add_argument("--log-file", action="store_true", help="Écrit un journal DEBUG dans --out/logs.")
    parser.add_argument("--verbose", action="store_true", help="Affiche les traces DEBUG en console.")
    parser.add_argument("--quiet", action="store_true", help="N'affiche que les avertissements.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if (args.plot or args.steps or args.log_file) and args.out is None:
        parser.error("--plot, --steps et --log-file nécessitent --out")

    try:
        config = load_scenario(args.scenario, args.config)
        config = with_overrides(
            config,
            iterations=args.iterations,
            seed=args.seed,
            threshold=args.threshold,
            weighting=args.weighting,
        )
    except (KeyError, ValueError, TypeError, OSError) as exc:
        parser.error(str(exc))

    dirs = ensure_output_dirs(args.out) if args.out is not None else None
    logger, log_path = configure_logging(
        scenario=config.name,
        seed=config.seed,
        quiet=args.quiet,
        verbose=args.verbose,
        log_dir=dirs["outputs"] / "logs" if dirs and args.log_file else None,
    )
    if log_path is not None:
        logger.info("log file: %s", log_path)

    frames = FrameReporter(keep_steps=args.steps) if dirs else None
    reporter = MultiReporter(LoggingReporter(logger, log_steps=args.log_steps), frames)
    rng = spawn_rng(config.seed, config.name)
    summary = run_batch(config, rng, reporter)

    if dirs is not None and frames is not None:
        runs = frames.runs_frame()
        runs_path = save_csv(runs, dirs["csv"] / "runs.csv")
        logger.info("runs written to %s", runs_path)
        if args.steps:
            save_csv(frames.steps_frame(), dirs["csv"] / "steps.csv")
        save_json(
            {"scenario": config.name, "seed": config.seed, "summary": summary.as_dict()},
            dirs["outputs"] / "summary.json",
        )
        if args.plot:
            matplotlib.use("Agg")
            figure = plot_batch(runs, summary, dirs["figures"] / "remaining_payload.png")
            logger.info("figure written to %s", figure)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
