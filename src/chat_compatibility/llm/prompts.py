import yaml
from pathlib import Path

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

def load_prompt(name: str, prompts_dir: Path = PROMPTS_DIR) -> str:
    yaml_path = prompts_dir / f"{name}.yaml"
    if not yaml_path.exists():
        raise FileNotFoundError(f"Prompt {name} not found in {prompts_dir}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data.get("content", "")
