"""Segmentation run configuration."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from imgseg.foundation.exceptions import ConfigurationError, MissingConfigError
from imgseg.foundation.objectives import ObjectiveWeights

MODES = ("nsga2", "weighted")
EVAL_BACKENDS = ("serial", "thread")


class _SerializableConfig:
    """Mixin to serialize dataclass configs."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


def _require_fields(cfg: Dict[str, Any], fields: Tuple[str, ...], config_class: str) -> None:
    """Validate that required fields are present in configuration."""
    for name in fields:
        if name not in cfg:
            raise MissingConfigError(name, config_class)


@dataclass(frozen=True)
class SegmentationConfigData(_SerializableConfig):
    pop_size: int
    generations: int
    selection: Tuple[str, Dict[str, Any]]
    crossover: Tuple[str, Dict[str, Any]]
    mutation: Tuple[str, Dict[str, Any]]
    segments: Tuple[int, int]
    mode: str = "nsga2"
    weights: ObjectiveWeights = field(default_factory=ObjectiveWeights)
    offspring_factor: int = 3
    eval_backend: str = "serial"
    n_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.pop_size) < 2:
            raise ConfigurationError(
                f"pop_size must be at least 2; got {self.pop_size}.",
                suggestion="Crossover needs pairs of parents",
            )
        if int(self.generations) < 0:
            raise ConfigurationError(f"generations must be non-negative; got {self.generations}.")
        lower, upper = self.segments
        if int(lower) < 1 or int(upper) < int(lower):
            raise ConfigurationError(
                f"segment bounds must satisfy 1 <= lower <= upper; got ({lower}, {upper}).",
            )
        if self.mode not in MODES:
            raise ConfigurationError(
                f"Unknown mode '{self.mode}'.",
                suggestion=f"Use one of: {', '.join(MODES)}",
            )
        if self.eval_backend not in EVAL_BACKENDS:
            raise ConfigurationError(
                f"Unknown eval backend '{self.eval_backend}'.",
                suggestion=f"Use one of: {', '.join(EVAL_BACKENDS)}",
            )
        if int(self.offspring_factor) < 1:
            raise ConfigurationError(f"offspring_factor must be at least 1; got {self.offspring_factor}.")
        if self.n_workers is not None and int(self.n_workers) < 1:
            raise ConfigurationError(f"n_workers must be positive; got {self.n_workers}.")
        _check_probability(self.crossover, "crossover")
        _check_probability(self.mutation, "mutation")
        sel_method, sel_params = self.selection
        # Weighted mode pairs parents at random and never runs a tournament.
        if self.mode == "nsga2" and str(sel_method).lower() == "tournament":
            size = int(sel_params.get("size", 2))
            if size < 1:
                raise ConfigurationError(f"tournament size must be positive; got {size}.")
            if not sel_params.get("replacement", True) and size > int(self.pop_size):
                raise ConfigurationError(
                    f"Tournament size {size} exceeds population size {self.pop_size}.",
                    suggestion="Lower the tournament size or allow replacement",
                )


def _check_probability(operator: Tuple[str, Dict[str, Any]], kind: str) -> None:
    prob = operator[1].get("prob")
    if prob is not None and not 0.0 <= float(prob) <= 1.0:
        raise ConfigurationError(f"{kind} prob must be in [0, 1]; got {prob}.")


def _split_operator(value: Any, default_method: str) -> Tuple[str, Dict[str, Any]]:
    if isinstance(value, (tuple, list)):
        return str(value[0]), dict(value[1]) if len(value) > 1 else {}
    if isinstance(value, dict):
        params = dict(value)
        method = params.pop("method", params.pop("type", default_method))
        nested = params.pop("params", None)
        if nested:
            params.update(nested)
        return str(method), params
    return str(value), {}


class SegmentationConfig:
    """
    Declarative configuration holder for a segmentation run.
    Provides a fluent builder that yields an immutable SegmentationConfigData.

    Examples:
        # Fluent builder
        cfg = SegmentationConfig().pop_size(50).generations(20).crossover("two_point").fixed()

        # Quick default configuration
        cfg = SegmentationConfig.default()

        # From dictionary (e.g. a parsed YAML file)
        cfg = SegmentationConfig.from_dict({"pop_size": 50, "mutation": {"method": "creep", "prob": 0.05}})
    """

    def __init__(self) -> None:
        self._cfg: Dict[str, Any] = {}

    @classmethod
    def defaults(cls) -> "SegmentationConfig":
        """Builder pre-filled with the default run parameters."""
        return (
            cls()
            .pop_size(100)
            .generations(50)
            .selection("tournament", size=7, replacement=False)
            .crossover("one_point", prob=1.0)
            .mutation("single_gene", prob=0.9)
            .segments(6, 15)
            .mode("nsga2")
            .weights(edge=1.0, connectivity=1000.0, deviation=2.0)
            .offspring_factor(3)
            .eval_backend("serial")
        )

    @classmethod
    def default(cls, pop_size: int = 100, generations: int = 50) -> SegmentationConfigData:
        """
        Create a default configuration.

        Args:
            pop_size: Population size (default: 100)
            generations: Number of generations (default: 50)

        Returns:
            Frozen SegmentationConfigData ready to use
        """
        return cls.defaults().pop_size(pop_size).generations(generations).fixed()

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> SegmentationConfigData:
        """
        Create configuration from a dictionary. Missing keys fall back to the defaults.

        Operator entries accept ``(method, params)``, a bare method string, or
        a mapping with ``method`` plus params (flat or under ``params``).
        """
        known = {
            "pop_size",
            "generations",
            "selection",
            "crossover",
            "mutation",
            "segments",
            "mode",
            "weights",
            "offspring_factor",
            "eval_backend",
            "n_workers",
        }
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}.",
                suggestion=f"Valid keys: {', '.join(sorted(known))}",
            )
        builder = cls.defaults()
        try:
            _apply_entries(builder, config)
            return builder.fixed()
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid configuration value: {exc}.",
                suggestion="Check the types of the run parameters (integers, probabilities, method names)",
            ) from exc

    def pop_size(self, value: int) -> "SegmentationConfig":
        self._cfg["pop_size"] = int(value)
        return self

    def generations(self, value: int) -> "SegmentationConfig":
        self._cfg["generations"] = int(value)
        return self

    def selection(self, method: str, **kwargs) -> "SegmentationConfig":
        self._cfg["selection"] = (method, kwargs)
        return self

    def crossover(self, method: str | tuple, params: dict | None = None, **kwargs) -> "SegmentationConfig":
        if isinstance(method, tuple) and params is None and not kwargs:
            method, params = method
        self._cfg["crossover"] = (method, dict(params or kwargs))
        return self

    def mutation(self, method: str | tuple, params: dict | None = None, **kwargs) -> "SegmentationConfig":
        if isinstance(method, tuple) and params is None and not kwargs:
            method, params = method
        self._cfg["mutation"] = (method, dict(params or kwargs))
        return self

    def segments(self, lower: int, upper: int) -> "SegmentationConfig":
        """Bounds for the number of trees in each seed forest."""
        self._cfg["segments"] = (int(lower), int(upper))
        return self

    def mode(self, value: str) -> "SegmentationConfig":
        self._cfg["mode"] = str(value).lower()
        return self

    def weights(self, edge: float = 1.0, connectivity: float = 1.0, deviation: float = 1.0) -> "SegmentationConfig":
        self._cfg["weights"] = ObjectiveWeights(float(edge), float(connectivity), float(deviation))
        return self

    def offspring_factor(self, value: int) -> "SegmentationConfig":
        self._cfg["offspring_factor"] = int(value)
        return self

    def eval_backend(self, value: str, n_workers: int | None = None) -> "SegmentationConfig":
        self._cfg["eval_backend"] = str(value).lower()
        if n_workers is not None:
            self._cfg["n_workers"] = int(n_workers)
        return self

    def n_workers(self, value: int | None) -> "SegmentationConfig":
        self._cfg["n_workers"] = None if value is None else int(value)
        return self

    def fixed(self) -> SegmentationConfigData:
        _require_fields(
            self._cfg,
            ("pop_size", "generations", "selection", "crossover", "mutation", "segments"),
            "SegmentationConfig",
        )
        return SegmentationConfigData(
            pop_size=self._cfg["pop_size"],
            generations=self._cfg["generations"],
            selection=self._cfg["selection"],
            crossover=self._cfg["crossover"],
            mutation=self._cfg["mutation"],
            segments=self._cfg["segments"],
            mode=self._cfg.get("mode", "nsga2"),
            weights=self._cfg.get("weights", ObjectiveWeights()),
            offspring_factor=self._cfg.get("offspring_factor", 3),
            eval_backend=self._cfg.get("eval_backend", "serial"),
            n_workers=self._cfg.get("n_workers"),
        )


def _apply_entries(builder: "SegmentationConfig", config: Dict[str, Any]) -> None:
    if "pop_size" in config:
        builder.pop_size(config["pop_size"])
    if "generations" in config:
        builder.generations(config["generations"])
    if "selection" in config:
        method, params = _split_operator(config["selection"], "tournament")
        builder.selection(method, **params)
    if "crossover" in config:
        method, params = _split_operator(config["crossover"], "one_point")
        builder.crossover(method, **params)
    if "mutation" in config:
        method, params = _split_operator(config["mutation"], "single_gene")
        builder.mutation(method, **params)
    if "segments" in config:
        seg = config["segments"]
        if isinstance(seg, dict):
            _require_fields(seg, ("lower", "upper"), "SegmentationConfig")
            builder.segments(seg["lower"], seg["upper"])
        else:
            builder.segments(*seg)
    if "mode" in config:
        builder.mode(config["mode"])
    if "weights" in config:
        w = config["weights"]
        if isinstance(w, ObjectiveWeights):
            builder.weights(edge=w.edge, connectivity=w.connectivity, deviation=w.deviation)
        elif isinstance(w, dict):
            builder.weights(**w)
        else:
            builder.weights(*w)
    if "offspring_factor" in config:
        builder.offspring_factor(config["offspring_factor"])
    if "eval_backend" in config:
        builder.eval_backend(config["eval_backend"])
    if "n_workers" in config:
        builder.n_workers(config["n_workers"])


__all__ = [
    "MODES",
    "EVAL_BACKENDS",
    "SegmentationConfigData",
    "SegmentationConfig",
]
