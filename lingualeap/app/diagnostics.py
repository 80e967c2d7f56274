from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    if not text:
        return "Unknown runtime error."
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return "Unknown runtime error."
    for ln in reversed(lines):
        if ln.startswith("File "):
            continue
        if ln.startswith("^"):
            continue
        if ln.startswith("Traceback "):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "portaudio" in s:
        return "The PortAudio library is missing. Install it (e.g. libportaudio2) and restart."
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "jsondecodeerror" in s or "expecting value" in s:
        return "The sentence data file is not valid JSON. Fix the file and press Retry."
    if "filenotfounderror" in s or "no such file" in s:
        return "The sentence data file was not found. Check data_path in the config and press Retry."
    if "only 16-bit pcm wav" in s or "unsupported or corrupt audio" in s:
        return "Audio clips must be 16-bit PCM WAV files. Re-export the clip and retry."
    if "failed to open audio output" in s:
        return "Audio output init failed. Check the output device selection."
    if "api key" in s or "api_key" in s:
        return "Set GEMINI_API_KEY (or GOOGLE_API_KEY) to use the AI tools."
    return "Check logs for full traceback."
