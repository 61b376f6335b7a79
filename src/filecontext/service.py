"""Query pipeline: paths -> sandbox -> reader -> assembler -> formatter -> router."""

import logging
from typing import List, Optional

from .backends import ModelRouter
from .config import Config
from .context import ContextAssembler
from .errors import InvalidRequest
from .filesystem import FileTreeReader
from .models import FileNode, QueryRequest, QueryResponse
from .prompts import PromptFormatter
from .sandbox import PathSandbox

logger = logging.getLogger(__name__)


class QueryService:
    """Answers a question about a set of files in the storage root.

    Request-shape problems (blank query, bad or escaping path, missing file)
    raise before any backend is contacted. Backend problems come back inside
    the returned :class:`QueryResponse`.
    """

    def __init__(
        self,
        config: Config,
        reader: Optional[FileTreeReader] = None,
        router: Optional[ModelRouter] = None,
        assembler: Optional[ContextAssembler] = None,
        formatter: Optional[PromptFormatter] = None,
    ):
        self.config = config
        self.reader = reader or FileTreeReader(
            PathSandbox(config.storage_root), max_workers=config.read_workers
        )
        self.router = router or ModelRouter(config)
        self.assembler = assembler or ContextAssembler(
            per_file_limit=config.per_file_limit, total_limit=config.total_context_limit
        )
        self.formatter = formatter or PromptFormatter()

    @classmethod
    def from_config(cls, config: Config) -> "QueryService":
        return cls(config)

    def collect(self, paths: List[str]) -> List[FileNode]:
        """Materialize context entries for each path, in request order.

        Every path is sandbox-checked before the first read, so one bad
        path rejects the whole request without touching the disk.
        """
        for path in paths:
            self.reader.sandbox.resolve(path)

        nodes: List[FileNode] = []
        for path in paths:
            nodes.extend(self.reader.context_from(path))
        return nodes

    def build_prompt(self, request: QueryRequest) -> tuple[str, str]:
        """Return ``(prompt, context)`` for a request."""
        if not request.query or not request.query.strip():
            raise InvalidRequest("Invalid query parameter")

        paths = request.targets()
        nodes = self.collect(paths)
        context = self.assembler.assemble(nodes)
        prompt = self.formatter.format(context, request.query)

        logger.debug(
            "Built prompt from %d paths: context=%d chars, prompt=%d chars",
            len(paths),
            len(context),
            len(prompt),
        )
        return prompt, context

    def answer(self, request: QueryRequest) -> QueryResponse:
        """Run the full pipeline for one request.

        Raises:
            InvalidRequest: Blank query or unusable path
            SandboxViolation: A path escapes the storage root
            NotFound: A path does not exist
            ReadFailure: A directly requested file cannot be read
        """
        model = request.model or self.config.default_backend
        prompt, context = self.build_prompt(request)

        response = self.router.query(prompt, context, model)
        if response.error:
            logger.warning("Query to %s failed: %s", model, response.error)
        else:
            logger.info("Query processed by %s (%d chars)", model, len(response.text))
        return response

    def close(self) -> None:
        self.router.close()
