from testtraverse.extractors.javascript_extractor import JavascriptTestExtractor


def get_extractor(language: str):
    lang = language.lower()
    if lang == "javascript":
        return JavascriptTestExtractor()
    raise ValueError(f"No extractor for language: {language}")
