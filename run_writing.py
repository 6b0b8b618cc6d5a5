"""
Multi-Agent Writing - Interactive Runner
========================================
Run the multi-agent writing workflow on any request.

Usage:
    python run_writing.py "Write a short guide on brewing coffee" --tone casual --audience beginners
    python run_writing.py            # prompts for the request
"""

import argparse

from pydantic import ValidationError

from agents.base import WritingConfig
from agents.role_types import SynthesisStrategy, UserConstraints, WritingRequest
from orchestrator.workflow import WritingWorkflow
from utils.enhanced_logger import WorkflowLogger, set_logger


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the multi-agent writing workflow on a request")
    parser.add_argument("request", nargs="?", help="Writing request")
    parser.add_argument("--tone", help="Desired tone (e.g. casual, professional)")
    parser.add_argument("--audience", dest="target_audience", help="Target audience")
    parser.add_argument("--max-length", type=positive_int, help="Maximum length in characters")
    parser.add_argument("--strategy", choices=[s.value for s in SynthesisStrategy],
                        help="How to combine agent outputs (default: blending)")
    parser.add_argument("--role", action="append", dest="preferred_roles",
                        help="Preferred role id; repeat for several (max 4)")
    parser.add_argument("--timeout", type=positive_int, default=30_000, help="Per-agent timeout in ms")
    parser.add_argument("--no-cache", action="store_true", help="Disable the agent cache")
    parser.add_argument("--output", help="File to save the final content to")
    return parser


def run_writing_interactive():
    print("\n" + "=" * 60)
    print("🤖 MULTI-AGENT WRITING - Interactive Mode")
    print("=" * 60)

    # 1. Get User Input
    args = build_parser().parse_args()

    request = args.request
    if not request:
        request = input("\nEnter your writing request: ").strip()

    if not request:
        print("Request is required.")
        return

    # 2. Validate
    try:
        validated = WritingRequest(
            request=request,
            constraints=UserConstraints(
                max_length=args.max_length,
                tone=args.tone,
                target_audience=args.target_audience,
                preferred_roles=args.preferred_roles,
                synthesis_strategy=args.strategy
            )
        )
    except ValidationError as e:
        print(f"❌ Invalid request:\n{e}")
        return

    # 3. Setup Logger
    logger = WorkflowLogger("writing_interactive")
    set_logger(logger)

    # 4. Initialize workflow
    config = WritingConfig(agent_timeout_ms=args.timeout, enable_caching=not args.no_cache)
    logger.set_config(vars(config))
    workflow = WritingWorkflow(config)

    # 5. Run the Workflow
    print("\n🚀 Starting Multi-Agent Workflow...")
    print("   Stages: Role Analysis -> Agents (parallel) -> Synthesis")

    output = workflow.run(validated.request, validated.constraints)

    # 6. Display Results
    print("\n" + "=" * 60)
    print("📄 FINAL CONTENT")
    print("=" * 60 + "\n")
    print(output["final_content"])
    print("\n" + "=" * 60)

    metadata = output["metadata"]
    print("\n📊 SESSION STATS:")
    print(f"  • Time: {metadata['duration']} ms")
    print(f"  • Roles: {', '.join(r['name'] for r in output['identified_roles']) or 'none'}")
    print(f"  • Role analysis confidence: {output['role_analysis']['confidence']:.2f}")
    print(f"  • Agents succeeded: {len(output['agents'])}/{len(output['identified_roles'])}")
    print(f"  • Strategy: {metadata['synthesis_strategy']}")
    if metadata["warnings"]:
        print("  • Warnings:")
        for warning in metadata["warnings"]:
            print(f"    - {warning}")

    # 7. Save
    filename = args.output or f"writing_output_{request[:20].replace(' ', '_')}.md"
    with open(filename, 'w') as f:
        f.write(output["final_content"])
    print(f"\n💾 Output saved to: {filename}")

    logger.save()


if __name__ == "__main__":
    run_writing_interactive()
