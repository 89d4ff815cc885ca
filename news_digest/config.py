"""Configuration loading, persistence and feed list parsing."""

from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
from xml.etree import ElementTree as ET

logger = logging.getLogger(__name__)

CATEGORY_MARKER = "#"
LIST_BULLETS = ("- ", "* ")
DEFAULT_CATEGORY = "Uncategorized"

AVAILABLE_MODELS = {
    "gpt-4o": "GPT-4o",
    "gpt-4o-mini": "GPT-4o-mini",
}

DEFAULT_PROMPT = textwrap.dedent(
    """\
    You are a Markdown formatter tasked with organizing a detailed list of news items into a well-structured document.
    The input includes news headlines, summaries, and article links. Your task involves the following:

    ### Metadata and Context
    - **Input Structure**: A list of news headlines, summaries, and article links.

    ### Task Requirements
    1. **Summarization**: Extract and retain only the most critical information from the input data.
    2. **Deduplication**: Identify and remove redundant or overlapping information.
    3. **Prioritization**: Organize the news items based on their importance and relevance.
    4. **Categorization**: Group related news items into thematic categories (e.g., Global Politics, Technology).

    ### Response Structure
    - Provide concise summaries for each category.
    - Include clickable links to the original articles.

    ### User Needs
    - Assume the user is interested in concise and well-organized information.
    - Do not summarize what this document aims to accomplish or a summary of the data provided only provide the content no addition context of what it is and why.
    """
).strip()


@dataclass
class PluginSettings:
    """User-editable settings shared by the pipeline and the composer."""

    feeds: List[str] = field(default_factory=list)
    max_items: int = 5
    model: str = "gpt-4o-mini"
    prompt: str = DEFAULT_PROMPT
    api_key: str = ""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    vault: str
    env_file: Optional[str] = None
    settings: PluginSettings = field(default_factory=PluginSettings)
    prompt_file: Optional[str] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_feed_config(lines: Iterable[str]) -> Dict[str, List[str]]:
    """Group feed URLs under the most recent ``#`` category header.

    URLs listed before any header land in ``Uncategorized``. A header that
    repeats an earlier category starts that category's list over. A leading
    Markdown list bullet on a URL line is dropped.
    """
    feed_config: Dict[str, List[str]] = {}
    current_category = DEFAULT_CATEGORY

    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(CATEGORY_MARKER):
            current_category = stripped[len(CATEGORY_MARKER) :].strip()
            feed_config[current_category] = []
            continue
        for bullet in LIST_BULLETS:
            if stripped.startswith(bullet):
                stripped = stripped[len(bullet) :].strip()
                break
        feed_config.setdefault(current_category, []).append(stripped)

    return feed_config


def split_feed_lines(text: str) -> List[str]:
    """Split a free-text feed list into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_env_config(path: str) -> Dict[str, str]:
    """Parse environment variables from XML."""
    env_vars = {}
    if not path:
        return env_vars

    logger.info("Loading environment configuration from %s", path)
    try:
        tree = ET.parse(path)
        root = tree.getroot()
        for var in root.findall("variable"):
            name = var.attrib.get("name")
            value = var.text
            if name and value:
                env_vars[name] = value.strip()
    except Exception as exc:
        logger.warning("Failed to load environment config: %s", exc)
        raise

    return env_vars


def parse_max_items(value: object) -> int:
    """Return ``value`` as a positive integer or raise ``ValueError``."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError("Please enter a valid positive number.") from None
    if number <= 0:
        raise ValueError("Please enter a valid positive number.")
    return number


def validate_model(value: str) -> str:
    model = value.strip()
    if model not in AVAILABLE_MODELS:
        raise ValueError(
            f"Unsupported model '{value}'. Choose one of: "
            + ", ".join(AVAILABLE_MODELS)
        )
    return model


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    vault_text = root.findtext("vault")
    vault = _resolve_path(config_path, vault_text.strip() if vault_text else ".")

    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    settings = PluginSettings()
    settings.feeds = split_feed_lines(root.findtext("feeds", ""))
    settings.max_items = parse_max_items(root.findtext("max-items", "5"))
    settings.model = validate_model(root.findtext("model", settings.model))
    settings.api_key = (root.findtext("api-key") or "").strip()

    # Prompt: inline text or a file attribute
    prompt_file = None
    prompt_node = root.find("prompt")
    if prompt_node is not None:
        file_attr = prompt_node.attrib.get("file")
        if file_attr:
            prompt_file = _resolve_path(config_path, file_attr)
            try:
                settings.prompt = Path(prompt_file).read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                raise ValueError(f"Prompt file not found: {prompt_file}")
        elif prompt_node.text and prompt_node.text.strip():
            settings.prompt = textwrap.dedent(prompt_node.text).strip()

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    logger.info(
        "Loaded %d feed configuration lines (model=%s, max-items=%d)",
        len(settings.feeds),
        settings.model,
        settings.max_items,
    )
    return AppConfig(
        vault=vault,
        env_file=env_file,
        settings=settings,
        prompt_file=prompt_file,
        logging=logging_config,
    )


def _set_child_text(root: ET.Element, tag: str, text: str) -> ET.Element:
    node = root.find(tag)
    if node is None:
        node = ET.SubElement(root, tag)
    node.text = text
    return node


def save_settings(
    path: str, settings: PluginSettings, prompt_file: Optional[str] = None
) -> None:
    """Write ``settings`` back into the XML config at ``path``.

    Elements the settings do not own (vault, env, logging) are preserved.
    When ``prompt_file`` is given the prompt text goes to that file instead
    of the XML document.
    """
    config_path = Path(path)
    if config_path.exists():
        tree = ET.parse(config_path)
        root = tree.getroot()
    else:
        root = ET.Element("config")
        tree = ET.ElementTree(root)

    feeds_text = "".join(f"\n{line}" for line in settings.feeds) + "\n"
    _set_child_text(root, "feeds", feeds_text)
    _set_child_text(root, "max-items", str(settings.max_items))
    _set_child_text(root, "model", settings.model)
    _set_child_text(root, "api-key", settings.api_key)

    if prompt_file:
        Path(prompt_file).write_text(settings.prompt + "\n", encoding="utf-8")
    else:
        prompt_node = _set_child_text(root, "prompt", settings.prompt)
        prompt_node.attrib.pop("file", None)

    if config_path.parent and not config_path.parent.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
    tree.write(config_path, encoding="utf-8", xml_declaration=True)
    logger.info("Saved settings to %s", config_path)


class SettingsStore:
    """Mutates settings in place and persists each accepted change."""

    def __init__(
        self, settings: PluginSettings, persist: Callable[[PluginSettings], None]
    ):
        self.settings = settings
        self._persist = persist

    def _save(self) -> None:
        self._persist(self.settings)

    def set_feeds(self, text: str) -> None:
        self.settings.feeds = split_feed_lines(text)
        self._save()

    def set_max_items(self, value: object) -> None:
        self.settings.max_items = parse_max_items(value)
        self._save()

    def set_model(self, value: str) -> None:
        self.settings.model = validate_model(value)
        self._save()

    def set_api_key(self, value: str) -> None:
        self.settings.api_key = value.strip()
        self._save()

    def set_prompt(self, value: str) -> None:
        self.settings.prompt = value
        self._save()
