"""
Bundle assembly.

Produces the bundle artifact out of the module store: a JSON array of module
definitions in instantiation order, optionally wrapped into a call of the
loader runtime:

    (function(defs, params, evalCode){ ...loader... })(
    [["/app/util", "..."], ["/app/main", ["exports", "/app/util"], "..."]]
    ,{"entryPoint":{"module":"/app/main","function":"main"}},eval);

Everything except loading compiled code from disk is synchronous and
deterministic: the same store snapshot always produces the same bytes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from ..loader import get_loader_code
from .bundle_entry import BundleEntry, BundleEntryMeta
from .errors import BundleError, make_bundle_error
from .manifest import DEFAULT_REQUIRE_NAME, BundleConfig
from .minification import Minifier, TerserMinifier
from .module_orderer import ModuleOrderer, ModuleOrderResult
from .module_path_resolver import ModulePathResolver
from .module_store import ModuleRecord, ModuleStore

logger = logging.getLogger(__name__)

TSLIB_MODULE_NAME = "tslib"
LOADER_TARGET = "ES5"

_TRAILING_SEMICOLON = re.compile(r";?\s*$")
_EXPRESSION_HOLDER = "var __tsbundle_expr="


@dataclass
class WrapperParameters:
    """
    Launch parameters that are not part of the project configuration.

    Attributes:
        after_entry_point_executed: Expression of a callback invoked after the entry point ran
        entry_point_args: Expressions passed as arguments to the entry point function
    """

    after_entry_point_executed: str | None = None
    entry_point_args: list[str] | None = None


def serialize_entries(entries: list[BundleEntry]) -> str:
    """Serialize module definitions into the compact bundle array."""
    return json.dumps(
        [entry.to_wire() for entry in entries],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def needs_metadata(record: ModuleRecord, is_circular: bool) -> bool:
    """
    Whether a module definition must carry a metadata object.

    Export lists matter only for circular modules: the loader must hand out
    their exports before the module itself has been instantiated.
    """
    return (
        (is_circular and bool(record.exports))
        or bool(record.alt_name)
        or record.has_omnious_export
        or (is_circular and bool(record.export_module_references))
    )


def build_entry(record: ModuleRecord, is_circular: bool) -> BundleEntry:
    """
    Build the bundle entry of one module.

    Raises:
        BundleError: If the module has no compiled code
    """
    if not record.compiled_code:
        raise make_bundle_error(
            f"Code for module {record.name} is not loaded at bundling time.",
            module=record.name,
        )

    meta = None
    if needs_metadata(record, is_circular):
        meta = BundleEntryMeta(
            export_refs=sorted(record.export_module_references) if is_circular else [],
            exports=sorted(record.exports) if is_circular else [],
            arbitrary_type=record.has_omnious_export,
            alt_name=record.alt_name,
        )
    return BundleEntry(
        name=record.name,
        dependencies=list(record.dependencies),
        meta=meta,
        code=record.compiled_code,
    )


class BundleAssembler:
    """Assembles the bundle artifact of a project."""

    def __init__(
        self,
        config: BundleConfig,
        store: ModuleStore,
        path_resolver: ModulePathResolver,
        minifier: Minifier | None = None,
        loader_code: str | None = None,
    ):
        self.config = config
        self.store = store
        self.path_resolver = path_resolver
        self.minifier = minifier or TerserMinifier(compress_options=config.minify_options)
        self.loader_code = loader_code if loader_code is not None else get_loader_code()
        self._minified_loader_code: str | None = None

    async def produce_bundle(self, params: WrapperParameters | None = None) -> str:
        """Assemble the bundle and write it to the configured out_file."""
        logger.debug("Starting to produce bundle.")
        code = await self.assemble_bundle_code(params)
        out_file = self.config.out_file
        try:
            out_file.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(out_file.write_text, code, encoding="utf-8")
        except OSError as e:
            raise make_bundle_error(f"Failed to write bundle: {e}", file=out_file) from e
        logger.debug("Bundle produced.")
        return code

    async def assemble_bundle_code(self, params: WrapperParameters | None = None) -> str:
        """Assemble the bundle as a string, wrapped unless no_loader_code is set."""
        bare = await self.assemble_array()
        if self.config.no_loader_code:
            return bare
        return await self.wrap_bundle_code(bare, params)

    async def wrap_bundle_code(self, bare_bundle_code: str, params: WrapperParameters | None = None) -> str:
        """Wrap a bare definition array with the loader and its launch parameters."""
        prefix = await self.get_prefix_code()
        return "\n".join([prefix, bare_bundle_code, self.get_postfix_code(params)])

    async def assemble_array(self) -> str:
        """Assemble only the JSON array of module definitions."""
        order = self.get_module_order()
        self._check_module_filters(order.modules)

        await self.load_absent_module_code(order.modules)

        entries = self.build_module_entries(order)
        if self.config.embed_tslib and TSLIB_MODULE_NAME in order.absent_modules:
            entries.append(await self._get_tslib_entry())
        return serialize_entries(entries)

    def get_module_order(self) -> ModuleOrderResult:
        entry_name = self.entry_module_name()
        if not self.store.has(entry_name):
            raise make_bundle_error(
                "Entry module is not known to the compiler. Was it compiled?",
                file=self.config.project_dir / self.config.entry_module,
                module=entry_name,
            )
        order = ModuleOrderer(self.store).get_module_order(entry_name)
        logger.debug("Bundle related modules: %s", json.dumps(order.to_dict()))
        return order

    def entry_module_name(self) -> str:
        path = (self.config.project_dir / self.config.entry_module).resolve()
        return self.path_resolver.canonical_module_name(path)

    def build_module_entries(self, order: ModuleOrderResult) -> list[BundleEntry]:
        return [
            build_entry(self.store.get(name), name in order.circular_dependent_modules)
            for name in order.modules
        ]

    def _check_module_filters(self, names: list[str]) -> None:
        try:
            blacklist = [re.compile(p) for p in self.config.module_blacklist]
            whitelist = [re.compile(p) for p in self.config.module_whitelist]
        except re.error as e:
            raise BundleError(f"Invalid module filter regexp: {e}") from e

        blacklisted = [n for n in names if any(p.search(n) for p in blacklist)]
        if blacklisted:
            raise BundleError(f"Blacklisted module(s) included in bundle: {', '.join(blacklisted)}")

        if whitelist:
            rejected = [n for n in names if not any(p.search(n) for p in whitelist)]
            if rejected:
                raise BundleError(
                    f"Module(s) not matching any whitelist regexp included in bundle: {', '.join(rejected)}"
                )

    async def get_prefix_code(self) -> str:
        """Code placed before the definition array: the loader, opening its call."""
        code = self.loader_code
        if self.config.minify:
            if self._minified_loader_code is None:
                self._minified_loader_code = await self._minify_expression(code, "<loader>", LOADER_TARGET)
            code = self._minified_loader_code
        return "(" + _TRAILING_SEMICOLON.sub("", code) + ")("

    def get_postfix_code(self, params: WrapperParameters | None = None) -> str:
        """
        Code placed after the definition array: launch parameters and call closing.

        Keys are emitted in fixed order and only when not default, so unchanged
        configuration always yields the same text.
        """
        cfg = self.config
        params = params or WrapperParameters()

        def compact(value: object) -> str:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

        entry_point = {"module": self.entry_module_name(), "function": cfg.entry_function}
        fields = [f'"entryPoint":{compact(entry_point)}']
        if cfg.amd_require_name != DEFAULT_REQUIRE_NAME:
            fields.append(f'"amdRequire":{compact(cfg.amd_require_name)}')
        if cfg.commonjs_require_name != DEFAULT_REQUIRE_NAME:
            fields.append(f'"commonjsRequire":{compact(cfg.commonjs_require_name)}')
        if cfg.prefer_commonjs:
            fields.append('"preferCommonjs":true')
        # Values below are code, not data
        if params.after_entry_point_executed:
            fields.append(f'"afterEntryPointExecuted":{params.after_entry_point_executed}')
        if params.entry_point_args:
            fields.append(f'"entryPointArgs":[{",".join(params.entry_point_args)}]')
        if cfg.error_handler_name:
            fields.append(f'"errorHandler":{cfg.error_handler_name}')

        return ",{" + ",".join(fields) + "}," + cfg.eval_capability + ");"

    async def load_absent_module_code(self, names: list[str]) -> None:
        """
        Load compiled code of the given modules that have none cached.

        All reads run concurrently. The first failure cancels the rest and
        aborts the assembly.
        """
        records = [self.store.get(n) for n in names if not self.store.get(n).compiled_code]
        if not records:
            return

        logger.debug("Loading code of %d module(s) from %s", len(records), self.config.compiler.out_dir)
        tasks = [asyncio.create_task(self._load_module_code(record)) for record in records]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def _load_module_code(self, record: ModuleRecord) -> None:
        path = self.config.compiler.out_dir / (record.name.lstrip("/") + ".js")
        try:
            code = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise make_bundle_error(f"Failed to load compiled code: {e}", file=path, module=record.name) from e
        if self.config.minify:
            code = await self._minify_expression(code, record.name, self.config.compiler.target)
        record.compiled_code = code

    async def _get_tslib_entry(self) -> BundleEntry:
        root = self.config.project_dir / "node_modules" / TSLIB_MODULE_NAME
        if not root.exists():
            raise make_bundle_error("Failed to find tslib directory", file=root)
        if not root.is_dir():
            raise make_bundle_error("Expected tslib directory, but it's not a directory", file=root)

        lib_path = root / "tslib.js"
        try:
            lib_code = await asyncio.to_thread(lib_path.read_text, encoding="utf-8")
        except OSError as e:
            raise make_bundle_error(f"Failed to read tslib: {e}", file=lib_path) from e

        # tslib is UMD; with a dummy define it writes its helpers onto "global"
        code = "function(global){var define=function(){};" + lib_code + "}"
        if self.config.minify:
            code = await self._minify_expression(code, TSLIB_MODULE_NAME, self.config.compiler.target)
        return BundleEntry(name=TSLIB_MODULE_NAME, code=code)

    async def _minify_expression(self, code: str, label: str, target: str) -> str:
        # A bare function expression is not a valid program, hold it in a variable
        minified = await asyncio.to_thread(
            self.minifier, _EXPRESSION_HOLDER + _TRAILING_SEMICOLON.sub("", code.strip()) + ";", target, label
        )
        return _TRAILING_SEMICOLON.sub("", minified.strip().removeprefix(_EXPRESSION_HOLDER).strip())
