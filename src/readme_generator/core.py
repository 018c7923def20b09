import logging
import time

from readme_generator import config, context, extraction, llm, models

logger = logging.getLogger(__name__)


async def generate_readme(request: models.GenerateReadmeRequest) -> models.ReadmeResponse:
    cfg = config.get_config()
    ref = request.to_ref()
    logger.info(f"Generating README for {ref.full_name}")

    t0 = time.monotonic()
    result = await extraction.extract_repository(ref)
    logger.info(
        f"Extraction completed in {time.monotonic() - t0:.1f}s: "
        f"{len(result.tree)} tree entries, {len(result.files)} key files"
    )
    for failure in result.failures:
        logger.debug(f"  [dropped] {failure.path}: {failure.reason}")

    ctx = context.build_context(
        result,
        cfg.context.context_budget,
        cfg.context.max_file_size,
        config.BINARY_EXTENSIONS,
        cfg.context.max_tree_entries,
    )
    logger.info(f"Built context: {len(ctx)} chars")

    t0 = time.monotonic()
    readme = await llm.generate_readme(ctx, request.prompt, ref.repository, request.repo_description)
    logger.info(f"README generated in {time.monotonic() - t0:.1f}s")
    return models.ReadmeResponse(readme_content=readme)
