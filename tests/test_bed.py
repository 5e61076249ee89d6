import threading

import numpy as np
import pytest
from bedlib import Bed, Region, Track, RegionMap, UnsortedRegionsWarning


def _starts(regions): return [r.start for r in regions]


class TestBedInit:
    def test_empty(self):
        bed = Bed()
        assert bed.tracks == ()
        assert len(bed.regions) == 0
        assert len(bed) == 0
        assert list(bed) == []
        assert isinstance(bed.regions, RegionMap)

    def test_add_track(self):
        bed = Bed()
        tracks = [Track({'name': 'a'}), Track({'name': 'b'})]
        for track in tracks: bed.add_track(track)
        assert bed.tracks == tuple(tracks)

    def test_tracks_independent_of_region_map(self):
        bed = Bed()
        track = Track()
        bed.add_track(track)
        track.add_region(Region('chr1', 1, 2))
        assert len(bed) == 0
        bed.add_region(Region('chr2', 1, 2))
        assert len(track) == 1


class TestAddRegion:
    def test_preserves_call_order(self, decoder):
        bed = Bed()
        regions = [Region.from_columns('chr1', s, s + 10, [f'r{i}'], decoder) for i, s in enumerate([30, 10, 20, 10])]
        for r in regions: bed.add_region(r)
        assert list(bed.regions['chr1']) == regions

    def test_buckets_by_chrom(self, decoder):
        bed = Bed()
        bed.add_region(Region.from_columns('chr1', 1, 2, [], decoder))
        bed.add_region(Region.from_columns('chr2', 1, 2, [], decoder))
        bed.add_region(Region.from_columns('chr1', 3, 4, [], decoder))
        assert bed.chroms == ['chr1', 'chr2']
        assert len(bed.regions['chr1']) == 2
        assert 'chr2' in bed.regions and 'chr3' not in bed.regions
        assert len(bed) == 3
        assert all(r.chrom == chrom for chrom in bed.regions for r in bed.regions[chrom])

    def test_no_dedup(self):
        bed = Bed()
        region = Region('chr1', 1, 2)
        bed.add_region(region)
        bed.add_region(region)
        assert len(bed.regions['chr1']) == 2

    def test_read_only_view(self):
        bed = Bed()
        bed.add_region(Region('chr1', 1, 2))
        assert isinstance(bed.regions['chr1'], tuple)
        with pytest.raises(TypeError):
            bed.regions['chr1'] = []

    def test_concurrent_add(self):
        bed = Bed()
        def worker(offset):
            for i in range(200): bed.add_region(Region('chr1', offset + i, offset + i + 1))
        threads = [threading.Thread(target=worker, args=(k * 1000,)) for k in range(4)]
        for t in threads: t.start()
        for t in threads: t.join()
        assert len(bed) == 800


class TestSortRegions:
    def test_stable(self):
        bed = Bed()
        first_ten, second_ten = Region('chr2', 10, 99), Region('chr2', 10, 11)
        regions = [Region('chr2', 50, 55), first_ten, second_ten, Region('chr2', 30, 35)]
        for r in regions: bed.add_region(r)
        bed.sort_regions()
        sorted_regions = bed.regions['chr2']
        assert _starts(sorted_regions) == [10, 10, 30, 50]
        assert sorted_regions[0] is first_ten
        assert sorted_regions[1] is second_ten

    def test_random_buckets(self, rng):
        bed = Bed()
        added = {}
        for i in range(500):
            chrom = f'chr{rng.integers(1, 4)}'
            region = Region.random(chrom, rng, max_len=20, max_start=60)
            added.setdefault(chrom, []).append(region)
            bed.add_region(region)
        bed.sort_regions()
        for chrom, regions in added.items():
            result = bed.regions[chrom]
            starts = np.array(_starts(result))
            assert np.all(starts[:-1] <= starts[1:])
            # ties keep the order they were added in
            for start in set(starts.tolist()):
                before = [id(r) for r in regions if r.start == start]
                after = [id(r) for r in result if r.start == start]
                assert before == after

    def test_sorted_state(self):
        bed = Bed()
        bed.add_region(Region('chr1', 5, 6))
        assert not bed.regions.is_sorted('chr1')
        bed.sort_regions()
        assert bed.regions.is_sorted('chr1')
        bed.add_region(Region('chr1', 1, 2))
        bed.add_region(Region('chr2', 1, 2))
        assert not bed.regions.is_sorted('chr1')
        bed.sort_regions()
        assert _starts(bed.regions['chr1']) == [1, 5]
        assert bed.regions.is_sorted('chr2')
        assert bed.regions.is_sorted('chrUn')

    def test_empty(self):
        bed = Bed()
        bed.sort_regions()
        assert len(bed) == 0


class TestQueries:
    @pytest.fixture
    def bed(self, decoder):
        bed = Bed()
        rows = [
            ('chr1', 500, 600, ['e', '0', '+']),
            ('chr1', 100, 200, ['a', '0', '+']),
            ('chr1', 150, 1000, ['b', '0', '-']),
            ('chr1', 300, 400, ['c', '0', '-']),
            ('chr2', 100, 200, ['d', '0', '+']),
        ]
        for chrom, start, end, columns in rows:
            bed.add_region(Region.from_columns(chrom, start, end, columns, decoder))
        bed.sort_regions()
        return bed

    @pytest.mark.parametrize('start, end, expected', [
        (0, 100, []),
        (0, 101, ['a']),
        (180, 320, ['a', 'b', 'c']),
        (650, 700, ['b']),
        (1000, 2000, []),
        (350, 550, ['b', 'c', 'e']),
    ])
    def test_overlapping(self, bed, start, end, expected):
        assert [r.name for r in bed.overlapping('chr1', start, end)] == expected

    def test_overlapping_unknown_chrom(self, bed):
        assert bed.overlapping('chrX', 0, 10_000) == []

    def test_overlapping_unsorted_warns(self, bed, decoder):
        bed.add_region(Region.from_columns('chr1', 120, 130, ['late'], decoder))
        with pytest.warns(UnsortedRegionsWarning, match="chr1"):
            hits = bed.overlapping('chr1', 110, 125)
        assert [r.name for r in hits] == ['a', 'late']

    def test_overlapping_matches_linear_scan(self, rng):
        bed = Bed()
        for _ in range(300): bed.add_region(Region.random('chr1', rng, max_len=200, max_start=5000))
        bed.sort_regions()
        regions = bed.regions['chr1']
        for _ in range(50):
            q = Region.random('chr1', rng, max_len=500, max_start=5000)
            expected = [r for r in regions if r.overlaps(q.start, q.end)]
            assert bed.overlapping('chr1', q.start, q.end) == expected

    def test_on_strand(self, bed, decoder):
        forward = [r.name for r in bed.on_strand(decoder.strands.forward)]
        assert forward == ['a', 'e', 'd']
        reverse = [r.name for r in bed.on_strand(decoder.strands.reverse, chrom='chr1')]
        assert reverse == ['b', 'c']
        assert list(bed.on_strand(decoder.strands.forward, chrom='chrX')) == []

    def test_iter_and_len(self, bed):
        assert len(bed) == 5
        assert [r.name for r in bed] == ['a', 'b', 'c', 'e', 'd']
        assert '5 regions' in repr(bed)


class TestExtremeCoordinates:
    def test_sort_at_bounds(self):
        bed = Bed()
        regions = [Region('chr1', 2 ** 31 - 6, 2 ** 31 - 1), Region('chr1', -(2 ** 31), 0), Region('chr1', 1, 2)]
        for r in regions: bed.add_region(r)
        bed.sort_regions()
        assert _starts(bed.regions['chr1']) == [-(2 ** 31), 1, 2 ** 31 - 6]

    def test_query_bounds_beyond_64_bits(self):
        bed = Bed()
        regions = [Region('chr1', 1, 2), Region('chr1', 2 ** 31 - 6, 2 ** 31 - 1)]
        for r in regions: bed.add_region(r)
        bed.sort_regions()
        assert bed.overlapping('chr1', 0, 2 ** 64) == regions
        assert bed.overlapping('chr1', -(2 ** 70), 2 ** 70) == regions
        assert bed.overlapping('chr1', 2 ** 64, 2 ** 65) == []

    def test_inverted_query(self):
        bed = Bed()
        bed.add_region(Region('chr1', 10, 20))
        bed.sort_regions()
        assert bed.overlapping('chr1', 30, 5) == []


class TestWarningLocation:
    @pytest.fixture
    def unsorted(self):
        regions = RegionMap()
        regions.add(Region('chr1', 1, 2))
        return regions

    def test_from_region_map(self, unsorted):
        with pytest.warns(UnsortedRegionsWarning) as record:
            unsorted.query('chr1', 0, 5)
        assert record[0].filename == __file__

    def test_from_bed(self):
        bed = Bed()
        bed.add_region(Region('chr1', 1, 2))
        with pytest.warns(UnsortedRegionsWarning) as record:
            bed.overlapping('chr1', 0, 5)
        assert record[0].filename == __file__
