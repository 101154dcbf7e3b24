import argparse
import csv
import json
import logging
import os
import shutil
import time
from pathlib import Path

from jsbsim_console.runtime.client import JSBSim
from jsbsim_console.runtime.types import ProcessConfig


def _parse_assignment(text: str) -> tuple[str, str]:
    key, sep, value = text.partition('=')
    if not sep or not key.strip() or not value.strip():
        raise ValueError(f'Expected key=value, got {text!r}')
    return key.strip(), value.strip()


def _timestamp() -> str:
    return time.strftime('%Y%m%d-%H%M%S', time.localtime())


def _default_out_dir(repo_root: Path) -> Path:
    return repo_root / 'output' / f'jsbsim-{_timestamp()}'


def _open_client(*, connect: str | None, config: ProcessConfig) -> JSBSim:
    if connect:
        return JSBSim.connect(connect)
    return JSBSim.launch(config)


def run_session(
    *,
    config: ProcessConfig,
    connect: str | None,
    steps: int,
    iterations: int,
    sample_props: list[str],
    set_props: list[str],
    out_dir: str | None,
    resume_after: bool = False,
    resume_wait_s: float = 0.1,
) -> int:
    if steps < 0:
        raise ValueError('steps must be >= 0')
    if iterations <= 0:
        raise ValueError('iterations must be > 0')
    if not sample_props:
        raise ValueError('at least one --sample property is required')
    assignments = [_parse_assignment(item) for item in set_props]

    repo_root = Path(__file__).resolve().parents[2]
    out_path = Path(out_dir).resolve() if out_dir else _default_out_dir(repo_root)
    if out_path.exists():
        shutil.rmtree(out_path)
    out_path.mkdir(parents=True, exist_ok=True)
    trace_path = out_path / 'trace.csv'
    config_path = out_path / 'config.json'

    trace_fields = ['step', 'property', 'value']
    resume_samples: list[float] = []
    with _open_client(connect=connect, config=config) as sim, trace_path.open(
        'w', newline='', encoding='utf-8'
    ) as trace_fp:
        trace_writer = csv.DictWriter(trace_fp, fieldnames=trace_fields, lineterminator='\n')
        trace_writer.writeheader()

        for key, value in assignments:
            sim.set(key, value)

        def _sample(step: int) -> None:
            for prop in sample_props:
                trace_writer.writerow({'step': step, 'property': prop, 'value': sim.get(prop)})

        _sample(0)
        for step in range(1, steps + 1):
            sim.iterate(iterations)
            _sample(step)

        if resume_after:
            sim.resume()
            resume_samples.append(sim.get(sample_props[0]))
            time.sleep(resume_wait_s)
            resume_samples.append(sim.get(sample_props[0]))

    run_config = {
        'connect': connect,
        'executable': config.executable,
        'root': str(config.root),
        'aircraft': config.aircraft,
        'init_script': config.init_script,
        'script': config.script,
        'simulation_hz': config.simulation_hz,
        'suspend_on_start': config.suspend_on_start,
        'realtime': config.realtime,
        'port': config.port,
        'steps': steps,
        'iterations': iterations,
        'sample_props': sample_props,
        'set_props': dict(assignments),
        'resume_samples': resume_samples,
        'output_dir': str(out_path),
    }
    config_path.write_text(json.dumps(run_config, indent=2), encoding='utf-8')

    print(f'[jsbsim.run] output_dir={out_path}')
    print(
        f'[jsbsim.run] steps={steps} iterations={iterations} '
        f'samples={len(sample_props) * (steps + 1)} completed'
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Drive a JSBSim instance over its console port.')
    parser.add_argument(
        '--connect',
        default=None,
        help='host:port of a running JSBSim console; when omitted JSBSim is launched.',
    )
    parser.add_argument('--executable', default=os.environ.get('JSBSIM_EXECUTABLE', 'JSBSim'))
    parser.add_argument('--root', default=os.environ.get('JSBSIM_ROOT', './jsbsim_root'))
    parser.add_argument('--aircraft', default='Concorde')
    parser.add_argument('--init-script', default='reset00')
    parser.add_argument('--script', default=None)
    parser.add_argument('--simulation-hz', type=int, default=400)
    parser.add_argument('--port', type=int, default=int(os.environ.get('JSBSIM_PORT', '5556')))
    parser.add_argument(
        '--no-suspend',
        action='store_true',
        help='Start the simulation running instead of on hold.',
    )
    parser.add_argument(
        '--realtime',
        action='store_true',
        default=os.environ.get('JSBSIM_REALTIME', '0') in {'1', 'true', 'True'},
        help='Run JSBSim in real time (default false; can be enabled with JSBSIM_REALTIME=1).',
    )
    parser.add_argument('--steps', type=int, default=10)
    parser.add_argument('--iterations', type=int, default=40)
    parser.add_argument(
        '--sample',
        action='append',
        default=None,
        help='Property to record after every step (repeatable).',
    )
    parser.add_argument(
        '--set',
        action='append',
        default=[],
        dest='set_props',
        help='key=value assignment applied before stepping (repeatable).',
    )
    parser.add_argument('--resume-after', action='store_true')
    parser.add_argument('--out-dir', default=None)
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
    )

    config = ProcessConfig(
        executable=args.executable,
        root=Path(args.root),
        aircraft=args.aircraft,
        init_script=args.init_script,
        script=args.script,
        simulation_hz=args.simulation_hz,
        suspend_on_start=not args.no_suspend,
        realtime=args.realtime,
        port=args.port,
    )
    return run_session(
        config=config,
        connect=args.connect,
        steps=args.steps,
        iterations=args.iterations,
        sample_props=args.sample or ['simulation/sim-time-sec'],
        set_props=args.set_props,
        out_dir=args.out_dir,
        resume_after=args.resume_after,
    )


if __name__ == '__main__':
    raise SystemExit(main())
