import geolocus.__main__ as cli
from geolocus.solver import SolveReport

TRIANGLE = '''sketch "Equilateral"
origin A
points B, C
distance A-B = 5
distance A-C = 5
distance B-C = 5
'''


def test_main_prints_coordinates(tmp_path, capsys):
    path = tmp_path / 'triangle.sketch'
    path.write_text(TRIANGLE, encoding='utf-8')

    code = cli.main([str(path), '--show-plan', '--normalize'])

    out = capsys.readouterr().out
    assert code == 0
    assert 'Sketch: Equilateral' in out
    assert 'Status: solved' in out
    assert 'Plan:' in out
    assert '  B (orbiter): #0' in out
    assert '  A: (0.000000, 0.000000)' in out
    assert '  B: (5.000000, 0.000000)' in out
    assert '  C: (2.500000, 4.330127)' in out
    assert 'Normed points:' in out


def test_main_passes_flags_to_solver(tmp_path, monkeypatch, capsys):
    path = tmp_path / 'triangle.sketch'
    path.write_text(TRIANGLE + 'solver [max_plans=5]\n', encoding='utf-8')
    seen = []

    def _solve_graph(graph, options):
        seen.append(options)
        return SolveReport(status='ordering-failed', warnings=['no order'])

    monkeypatch.setattr(cli, 'solve_graph', _solve_graph)

    code = cli.main([str(path), '--max-steps', '40', '--samples', '3', '--lookahead'])

    out = capsys.readouterr().out
    assert code == 2
    assert seen[0].max_plans == 5
    assert seen[0].max_steps == 40
    assert seen[0].orbiter_samples == 3
    assert seen[0].lookahead is True
    assert seen[0].refine is False
    assert 'Status: ordering-failed' in out
    assert '  - no order' in out
    assert 'Coordinates:' not in out
