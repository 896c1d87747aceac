from student_records.seed import SAMPLE_STUDENTS, seed_data


def test_seed_empty_table(client, database):
    assert seed_data(database) == len(SAMPLE_STUDENTS)

    emails = {s["email"] for s in client.get("/api/students").json()}
    assert emails == {s["email"] for s in SAMPLE_STUDENTS}


def test_seed_skips_when_data_exists(database, add_student):
    add_student()
    assert seed_data(database) == 0
