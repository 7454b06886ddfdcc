from __future__ import annotations

import dataclasses
import json
import logging
import pathlib
import tomllib
import typing
import zipfile
from functools import cached_property

import pydantic
import yaml

from . import models
from .narrative.models import Scenario
from .narrative.models import ScenarioBundle
from .rules.engine import BuilderEngine

logger = logging.getLogger(__name__)

PathLike = pathlib.Path | zipfile.Path

M = typing.TypeVar("M", bound=pydantic.BaseModel)

MANIFEST_STEM = "content"
SCENARIO_CONFIG_STEM = "config"
SCENARIO_BODY = "content.md"


@dataclasses.dataclass
class ContentPack:
    """Everything loaded from one content directory.

    Attributes:
        manifest: The parsed content manifest.
        creation: Category data for the character builder.
        appearance: Appearance options and portraits.
        scenarios: The scenario bundle for narrative play.
        names: Name suggestions. Empty if the manifest names no file.
        bad_defs: Problems found while loading. Parts that failed to load
            are left empty.
    """

    manifest: models.ContentManifest
    creation: models.CharacterCreationData
    appearance: models.AppearanceConfig
    scenarios: ScenarioBundle
    names: models.NamesConfig = dataclasses.field(default_factory=models.NamesConfig)
    bad_defs: list[models.BadDefinition] = dataclasses.field(default_factory=list)

    @cached_property
    def engine(self) -> BuilderEngine:
        return BuilderEngine(
            self.creation, self.appearance, self.manifest, names=self.names
        )


def load_content(path: str | PathLike, with_bad_defs: bool = True) -> ContentPack:
    """Load a content pack from disk by path.

    The path must be a directory containing a manifest file named
    "content" with a json, toml, or yaml/yml extension, or the manifest
    file itself.

    Args:
        path: Path to a directory that contains a manifest file.
            Alternatively, a path to a zipfile that contains one.
        with_bad_defs: If true (the default), will not raise an exception
            if a content file is bad. Instead, the returned pack will have
            its `bad_defs` property populated with BadDefinition models.
    """
    path = _as_path(path)
    if path.is_file():
        manifest_path = path
        base = path.parent
    else:
        manifest_path = _find_file(path, stem=MANIFEST_STEM, depth=1)
        if not manifest_path:
            raise ValueError(f"No content manifest found within {path}")
        base = manifest_path.parent
    manifest = _parse_model(manifest_path, models.ContentManifest)

    bad_defs: list[models.BadDefinition] = []
    creation = _load_part(
        base,
        manifest.character_creation,
        models.CharacterCreationData,
        bad_defs,
        with_bad_defs,
    )
    appearance = _load_part(
        base, manifest.appearance, models.AppearanceConfig, bad_defs, with_bad_defs
    )
    names = models.NamesConfig()
    if manifest.names:
        names = _load_part(
            base, manifest.names, models.NamesConfig, bad_defs, with_bad_defs
        )
    scenarios, scenario_bad_defs = load_scenarios(
        base / manifest.scenarios, with_bad_defs=with_bad_defs
    )
    bad_defs.extend(scenario_bad_defs)
    for bad in bad_defs:
        logger.warning("Bad definition in %s: %s", bad.path, bad.exception_message)
    logger.debug(
        "Loaded content %s: %d categories, %d scenarios",
        manifest.id,
        len(creation.categories),
        len(scenarios),
    )
    return ContentPack(
        manifest=manifest,
        creation=creation,
        appearance=appearance,
        scenarios=scenarios,
        names=names,
        bad_defs=bad_defs,
    )


def load_creation_data(path: str | PathLike) -> models.CharacterCreationData:
    return _parse_model(_as_path(path), models.CharacterCreationData)


def load_appearance(path: str | PathLike) -> models.AppearanceConfig:
    return _parse_model(_as_path(path), models.AppearanceConfig)


def load_scenarios(
    path: str | PathLike, with_bad_defs: bool = True
) -> tuple[ScenarioBundle, list[models.BadDefinition]]:
    """Load scenarios from a bundle file or a directory of scenario folders.

    A bundle file maps scenario ids to scenarios. A scenario folder holds a
    `config` file (json/toml/yaml) and a `content.md` markdown body; the
    folder name is ignored in favor of the config's `id`.
    """
    path = _as_path(path)
    bad_defs: list[models.BadDefinition] = []
    if not path.exists():
        bad_defs.append(_bad(path, "MissingFile", f"No scenarios found at {path}"))
        if not with_bad_defs:
            raise ValueError(bad_defs[0].exception_message)
        return ScenarioBundle({}), bad_defs
    if path.is_file():
        return _parse_model(path, ScenarioBundle), bad_defs

    scenarios: dict[str, Scenario] = {}
    for folder in sorted(_iter_dirs(path), key=lambda p: p.name):
        try:
            scenario = _parse_scenario_folder(folder)
        except (ValueError, OSError, yaml.YAMLError) as exc:
            if not with_bad_defs:
                raise
            bad_defs.append(_bad(folder, repr(type(exc)), str(exc)))
            continue
        if scenario.id in scenarios:
            bad_defs.append(
                _bad(folder, "NonUniqueId", f"Non-unique scenario id {scenario.id}")
            )
            continue
        scenarios[scenario.id] = scenario
    return ScenarioBundle(scenarios), bad_defs


def validate_bundle(bundle: ScenarioBundle) -> list[str]:
    """Content problems that would strand a player.

    Checks for outcome links to missing scenarios, zero or several start
    scenarios, non-ending scenarios without choices, and choices whose
    outcomes don't end with a "default" outcome.
    """
    errors: list[str] = []
    for id, scenario in bundle.items():
        if not scenario.is_ending and not scenario.choices:
            errors.append(f"{id}: not an ending but has no choices")
        for choice in scenario.choices:
            for outcome in choice.outcomes:
                if outcome.next not in bundle:
                    errors.append(f"{id}: broken link to '{outcome.next}'")
            if not choice.outcomes or choice.outcomes[-1].condition.kind != "default":
                errors.append(
                    f"{id}: choice '{choice.text}' has no trailing default outcome"
                )
    starts = bundle.start_scenarios()
    if not starts:
        errors.append("No scenario marked with isStart: true")
    elif len(starts) > 1:
        errors.append(f"Multiple start scenarios: {', '.join(s.id for s in starts)}")
    return errors


def _as_path(path: str | PathLike) -> PathLike:
    if isinstance(path, str):
        if path.endswith(".zip"):
            return zipfile.Path(zipfile.ZipFile(path))
        return pathlib.Path(path)
    return path


def _load_part(
    base: PathLike,
    name: str,
    model: type[M],
    bad_defs: list[models.BadDefinition],
    with_bad_defs: bool,
) -> M:
    part_path = _resolve(base, name)
    try:
        if part_path is None:
            raise ValueError(f"No file named {name} within {base}")
        return _parse_model(part_path, model)
    except (ValueError, OSError, yaml.YAMLError) as exc:
        if not with_bad_defs:
            raise
        bad_defs.append(_bad(part_path or base / name, repr(type(exc)), str(exc)))
        return model()


def _resolve(base: PathLike, name: str) -> PathLike | None:
    """Find `name` under `base`, with or without its suffix."""
    candidate = base / name
    if candidate.exists() and candidate.is_file():
        return candidate
    directory = candidate.parent
    if not directory.is_dir():
        return None
    return _find_file(directory, stem=pathlib.PurePosixPath(name).name)


def _parse_scenario_folder(folder: PathLike) -> Scenario:
    config_path = _find_file(folder, stem=SCENARIO_CONFIG_STEM)
    if not config_path:
        raise ValueError(f"{folder.name}: missing config file")
    body_path = folder / SCENARIO_BODY
    if not body_path.exists():
        raise ValueError(f"{folder.name}: missing {SCENARIO_BODY}")
    config = next(_parse_raw(config_path), None)
    if not config or "id" not in config:
        raise ValueError(f"{folder.name}: config missing 'id' field")
    content = body_path.read_text(encoding="utf-8")
    return Scenario.model_validate(config | {"content": content})


def _parse_model(path: PathLike, model: type[M]) -> M:
    raw = next(_parse_raw(path), None)
    if raw is None:
        raise ValueError(f"Could not parse {path}")
    return model.model_validate(raw)


def _bad(path: PathLike, exception_type: str, message: str) -> models.BadDefinition:
    return models.BadDefinition(
        path=str(path), exception_type=exception_type, exception_message=message
    )


def _iter_dirs(path: PathLike) -> typing.Generator[PathLike, None, None]:
    for subpath in (p for p in path.iterdir() if p.is_dir()):
        yield subpath


def _iter_files(
    path: PathLike, stem=None, suffix=None
) -> typing.Generator[PathLike, None, None]:
    for subpath in (p for p in path.iterdir() if p.is_file()):
        if stem and _stem(subpath) != stem:
            continue
        if suffix and _suffix(subpath) != suffix:
            continue
        if _suffix(subpath) not in _PARSERS:
            continue
        yield subpath


def _find_file(path: PathLike, stem=None, suffix=None, depth=0) -> PathLike | None:
    for subpath in _iter_files(path, stem=stem, suffix=suffix):
        return subpath

    if depth >= 1:
        for subpath in _iter_dirs(path):
            recur_path = _find_file(subpath, stem=stem, suffix=suffix, depth=depth - 1)
            if recur_path:
                return recur_path
    return None


def _stem(path: PathLike) -> str:
    if isinstance(path, zipfile.Path):
        return pathlib.PurePosixPath(path.name).stem
    return path.stem


def _suffix(path: PathLike) -> str:
    if isinstance(path, zipfile.Path):
        return pathlib.PurePosixPath(path.name).suffix
    return path.suffix


def _parse_raw(path: PathLike) -> typing.Generator[dict, None, None]:
    parser = _PARSERS.get(_suffix(path))
    if parser is None:
        return
    yield from parser(path)


def _parse_toml(path: PathLike) -> typing.Generator[dict, None, None]:
    with path.open("rb") as toml_file:
        yield tomllib.load(toml_file)


def _parse_json(path: PathLike) -> typing.Generator[dict, None, None]:
    with path.open("rb") as json_file:
        yield json.load(json_file)


def _parse_yaml(path: PathLike) -> typing.Generator[dict, None, None]:
    with path.open("rb") as yaml_file:
        yield from yaml.safe_load_all(yaml_file)


_PARSERS: dict[str, typing.Callable[[PathLike], typing.Generator[dict, None, None]]] = {
    ".toml": _parse_toml,
    ".json": _parse_json,
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
}


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        pack = load_content(sys.argv[1])
        problems = validate_bundle(pack.scenarios)
        if pack.bad_defs:
            print("Bad defs:")
            for bad in pack.bad_defs:
                print(f"- {bad.path}: {bad.exception_message}")
        if problems:
            print("Scenario problems:")
            for problem in problems:
                print(f"- {problem}")
        if not (pack.bad_defs or problems):
            print(f"Content {pack.manifest.name} parsed successfully.")
            print("Categories:")
            for category in pack.creation.categories:
                print(
                    f"- {category.id}: {category.name} "
                    f"({len(category.options)} options, picks {category.min_picks}-{category.max_picks})"
                )
            print(f"Scenarios: {len(pack.scenarios)}")
        sys.exit(1 if pack.bad_defs or problems else 0)
