# 标准库
import sys
import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

# 本地导入
from ..config import VerifierConfig, VERIFY_CONFIG
from ..utils.abi_args import ArgumentCountError, ConstructorArgumentError, encode_constructor_args
from ..utils.broadcast import (
    Broadcast,
    BroadcastFormatError,
    BroadcastTransaction,
    CompiledArtifact,
    resolve_libraries
)

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    contract_name: Optional[str]
    address: Optional[str]
    submitted: bool
    error: Optional[str] = None


class ContractVerifier:
    """逐个合约调用 forge verify-contract，单个合约失败不影响其他合约"""

    def __init__(
        self,
        config: VerifierConfig,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run
    ):
        self.config = config
        self.runner = runner

    def build_command(
        self,
        address: str,
        contract_name: str,
        constructor_args: Optional[str],
        libraries: Sequence[str],
        chain: Optional[int] = None
    ) -> List[str]:
        """构建 forge verify-contract 命令"""
        cmd = [self.config.forge_bin, 'verify-contract', address, contract_name]
        if constructor_args:
            cmd += ['--constructor-args', constructor_args]
        cmd.append('--watch')
        if self.config.etherscan_api_key:
            cmd += ['-e', self.config.etherscan_api_key]
        if self.config.verifier_url:
            cmd += ['--verifier-url', self.config.verifier_url]
        if chain is not None:
            cmd += ['--chain', str(chain)]
        if self.config.debug:
            cmd.append(VERIFY_CONFIG['debug_verbosity'])
        for library in libraries:
            cmd += ['--libraries', library]
        return cmd

    def _masked(self, cmd: Sequence[str]) -> str:
        key = self.config.etherscan_api_key
        return ' '.join('***' if key and part == key else part for part in cmd)

    def run_forge(self, cmd: List[str]) -> bool:
        """执行 forge 命令，输出 stdout，失败时输出 stderr"""
        logger.debug("cli : %s", self._masked(cmd))
        try:
            result = self.runner(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.error("Cannot run %s, is Foundry installed and in PATH?", self.config.forge_bin)
            return False

        if result.returncode == 0:
            print(result.stdout)
            return True

        print(result.stdout)
        print(result.stderr, file=sys.stderr)
        return False

    def verify_transaction(
        self,
        transaction: BroadcastTransaction,
        libraries: Sequence[str],
        chain: Optional[int] = None
    ) -> VerificationResult:
        """验证单个合约创建交易"""
        address = transaction.contract_address
        contract_name = transaction.contract_name
        logger.debug("transaction to verify with address : %s and name : %s", address, contract_name)
        logger.debug("arguments of the contract : %s", transaction.arguments)

        if not address or not contract_name:
            message = f"Missing address or contract name in transaction ({address}, {contract_name})"
            logger.error(message)
            return VerificationResult(contract_name, address, False, message)

        # 读取编译产物
        artifact_path = self.config.artifact_path(contract_name)
        if not artifact_path.exists():
            message = f"Unable to reach {artifact_path}, compile contracts of the project"
            logger.error(message)
            return VerificationResult(contract_name, address, False, message)
        try:
            artifact = CompiledArtifact.load(artifact_path)
        except BroadcastFormatError as e:
            logger.error("Invalid artifact %s: %s", artifact_path, e)
            return VerificationResult(contract_name, address, False, str(e))

        # 链接库
        linked_libraries, unresolved = resolve_libraries(artifact.link_references, libraries)
        logger.debug("listLinkedLibraries : %s", [reference.key for reference in artifact.link_references])
        for reference in unresolved:
            logger.debug(
                "Unable to find linked lib %s of deployed contract %s in broadcast file",
                reference.key,
                contract_name
            )
        if unresolved:
            logger.warning("%s unresolved linked libraries for %s", len(unresolved), contract_name)
        logger.debug("librariesCli : %s", linked_libraries)

        # 构造函数参数
        constructor_args = None
        if transaction.arguments:
            constructor_inputs = artifact.constructor_inputs()
            if constructor_inputs is None:
                message = f"Unable to get constructor inputs type for {contract_name}"
                logger.error(message)
                return VerificationResult(contract_name, address, False, message)
            for constructor_input in constructor_inputs:
                logger.debug("constructorInput : %s", constructor_input)

            try:
                constructor_args = encode_constructor_args(constructor_inputs, transaction.arguments)
            except ArgumentCountError as e:
                logger.error("Argument count mismatch for %s: %s", contract_name, e)
                return VerificationResult(contract_name, address, False, str(e))
            except ConstructorArgumentError as e:
                logger.error("Unable to encode constructor arguments for %s: %s", contract_name, e)
                return VerificationResult(contract_name, address, False, str(e))
            logger.debug("encodedConstructorParameters : %s", constructor_args)

        cmd = self.build_command(address, contract_name, constructor_args, linked_libraries, chain)
        if not self.run_forge(cmd):
            return VerificationResult(contract_name, address, False, "forge verify-contract failed")
        return VerificationResult(contract_name, address, True)

    def verify_broadcast(self, broadcast: Broadcast) -> List[VerificationResult]:
        """验证部署记录中的所有合约创建交易"""
        logger.debug("libraries from broadcast file : %s", broadcast.libraries)
        results = []
        for transaction in broadcast.creations():
            results.append(self.verify_transaction(transaction, broadcast.libraries, broadcast.chain))

        submitted = sum(1 for result in results if result.submitted)
        print(f"verified {submitted}/{len(results)} contracts")
        return results
