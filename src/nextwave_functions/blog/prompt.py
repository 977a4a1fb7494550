from nextwave_functions.blog.models import GenerationRequest

SYSTEM_PROMPT = (
    "You are a professional content writer specializing in creating engaging, SEO-optimized blog posts."
)
KEYWORD_SEPARATOR = ", "
TARGET_WORDS = 800


def build_prompt(request: GenerationRequest) -> str:
    keywords = KEYWORD_SEPARATOR.join(request.keywords)
    return "\n".join(
        [
            f'Write a professional blog post about "{request.topic}" using the following keywords: {keywords}.',
            "The blog should include:",
            "- A compelling introduction",
            "- At least 3 subheadings with relevant content",
            "- Key points incorporating the keywords",
            "- A strong conclusion with a call-to-action",
            f"- Keep it around {TARGET_WORDS} words",
            f"- Use a {request.tone} tone",
            "",
            "Format the output in Markdown.",
        ]
    )
