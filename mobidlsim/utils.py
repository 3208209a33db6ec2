"""Utilitaires transverses : YAML, CSV et répertoires de sortie."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pandas as pd
import yaml


def load_yaml(path: str) -> Dict[str, Any]:
    """Charge un fichier YAML et retourne son contenu.

    Args:
        path: Chemin vers le fichier YAML.

    Returns:
        Le contenu du YAML sous forme de dictionnaire (vide si le fichier l'est).
    """
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: le document YAML doit être un mapping")
    return data


def ensure_output_dirs(base_dir: str | Path) -> Dict[str, Path]:
    """Crée les répertoires de sortie standards et retourne leurs chemins."""
    outputs_dir = Path(base_dir)
    csv_dir = outputs_dir / "csv"
    figures_dir = outputs_dir / "figures"

    csv_dir.mkdir(parents=True, exist_ok=True)
    figures_dir.mkdir(parents=True, exist_ok=True)

    return {
        "outputs": outputs_dir,
        "csv": csv_dir,
        "figures": figures_dir,
    }


def save_csv(df: pd.DataFrame, path: str | Path) -> Path:
    """Sauvegarde un DataFrame en CSV avec configuration standardisée."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def save_json(payload: Dict[str, Any], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False),
        encoding="utf-8",
    )
    return path
