"""Validation and error handling for scatter generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .settings import GenerationSettings, GenerationMode


class ScatterGenerationError(Exception):
    """Base exception for scatter generation failures."""
    pass


class ScatterConfigurationError(ScatterGenerationError):
    """Raised when settings cannot produce a valid run (fatal at start)."""
    pass


class UnknownSpeciesError(ScatterGenerationError, KeyError):
    """Raised when a species name/definition is not part of the active settings."""
    pass


@dataclass
class ValidationResult:
    """Result of a validation check."""
    valid: bool
    message: str = ""
    issues: List[str] = field(default_factory=list)

    def raise_if_invalid(self, error_class: type = ScatterConfigurationError):
        """Raise an error if validation failed."""
        if not self.valid:
            raise error_class(self.message)


class SettingsValidator:
    """Checks a GenerationSettings object before a run starts."""

    def validate(self, settings: GenerationSettings) -> ValidationResult:
        issues: List[str] = []

        if not settings.species:
            issues.append("No species configured: the plant pool is empty")
        if not settings.terrain.ground_layers:
            issues.append("No ground layers configured for surface probing")

        names = [s.name for s in settings.species]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            issues.append(f"Duplicate species names: {duplicates}")

        if settings.area_size[0] <= 0 or settings.area_size[1] <= 0:
            issues.append(f"Generation area must have positive size, got {settings.area_size}")

        issues.extend(self._check_noise(settings))
        issues.extend(self._check_mode(settings))
        for species in settings.species:
            issues.extend(self._check_species(species))

        if settings.max_plants_per_frame < 1:
            issues.append("max_plants_per_frame must be at least 1")
        if settings.regeneration.check_interval <= 0:
            issues.append("regeneration.check_interval must be positive")
        if settings.cluster.min_radius < 0 or settings.cluster.max_radius < settings.cluster.min_radius:
            issues.append("cluster radius range is invalid")

        if issues:
            return ValidationResult(valid=False, message="; ".join(issues), issues=issues)
        return ValidationResult(valid=True)

    def _check_noise(self, settings: GenerationSettings) -> List[str]:
        issues = []
        noise = settings.noise
        density = settings.density
        if noise.octaves < 1:
            issues.append("noise.octaves must be at least 1")
        if noise.scale <= 0:
            issues.append("noise.scale must be positive")
        if density.min_noise_threshold > density.max_noise_threshold:
            issues.append(
                f"min_noise_threshold {density.min_noise_threshold} exceeds max_noise_threshold {density.max_noise_threshold}"
            )
        return issues

    def _check_mode(self, settings: GenerationSettings) -> List[str]:
        issues = []
        if settings.mode == GenerationMode.GRID and settings.grid.spacing <= 0:
            issues.append("grid.spacing must be positive")
        if settings.mode == GenerationMode.POISSON:
            if settings.poisson.radius <= 0:
                issues.append("poisson.radius must be positive")
            if settings.poisson.sample_attempts < 1:
                issues.append("poisson.sample_attempts must be at least 1")
        if settings.mode == GenerationMode.UNIFORM and settings.uniform.points_per_100_square_meters < 0:
            issues.append("uniform.points_per_100_square_meters cannot be negative")
        return issues

    def _check_species(self, species) -> List[str]:
        issues = []
        label = f"Species '{species.name}'"
        if species.min_scale <= 0 or species.max_scale < species.min_scale:
            issues.append(f"{label}: invalid scale range {species.min_scale}..{species.max_scale}")
        if species.height_range[0] > species.height_range[1]:
            issues.append(f"{label}: invalid height range {species.height_range}")
        if species.preferred_noise_min > species.preferred_noise_max:
            issues.append(f"{label}: preferred noise window is inverted")
        if species.allow_clustering and (species.cluster_min < 1 or species.cluster_max < species.cluster_min):
            issues.append(f"{label}: invalid cluster range {species.cluster_min}..{species.cluster_max}")
        if species.regeneration_target_count < 0:
            issues.append(f"{label}: regeneration_target_count cannot be negative")
        return issues
