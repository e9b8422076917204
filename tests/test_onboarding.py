from folio.core.onboarding import CreationMethod, OnboardingStep, advance, back


def test_import_path_visits_every_step():
    step = OnboardingStep.LEVEL
    seen = [step]
    while step is not OnboardingStep.DONE:
        step = advance(step, CreationMethod.IMPORT)
        seen.append(step)

    assert seen == [OnboardingStep.LEVEL, OnboardingStep.METHOD, OnboardingStep.IMPORT, OnboardingStep.DONE]


def test_scratch_skips_import():
    assert advance(OnboardingStep.METHOD, CreationMethod.SCRATCH) is OnboardingStep.DONE
    assert back(OnboardingStep.DONE, CreationMethod.SCRATCH) is OnboardingStep.METHOD


def test_back_mirrors_advance():
    assert back(OnboardingStep.DONE, CreationMethod.IMPORT) is OnboardingStep.IMPORT
    assert back(OnboardingStep.IMPORT) is OnboardingStep.METHOD
    assert back(OnboardingStep.METHOD) is OnboardingStep.LEVEL


def test_ends_are_fixed_points():
    assert back(OnboardingStep.LEVEL) is OnboardingStep.LEVEL
    assert advance(OnboardingStep.DONE) is OnboardingStep.DONE
